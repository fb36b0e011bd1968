from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, DateTime, String, Text, func
from .base import Base


class Reminder(Base):
    __tablename__ = "reminders"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_time: Mapped[int] = mapped_column(BigInteger, index=True)  # ms since epoch
    category: Mapped[str] = mapped_column(String(32), default="Online Test")
    lead_time: Mapped[int] = mapped_column(BigInteger, default=0)  # ms; 0 — только дедлайн
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[object] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
