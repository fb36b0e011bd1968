from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, DateTime, Integer, String, func
from .base import Base


class Alert(Base):
    """Видимый алерт: Telegram сам выдаёт message_id, поэтому связь храним в БД."""
    __tablename__ = "alerts"
    alert_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    reminder_id: Mapped[int] = mapped_column(index=True)
    kind: Mapped[str] = mapped_column(String(16))  # pre-alert | deadline
    chat_id: Mapped[int] = mapped_column(BigInteger)
    message_id: Mapped[int] = mapped_column(BigInteger)
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), server_default=func.now())
