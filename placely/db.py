# placely/db.py
from __future__ import annotations

from typing import AsyncGenerator
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from placely.config import settings


# === 1. Общая база для всех моделей ===
class Base(DeclarativeBase):
    """Базовый класс для всех ORM-моделей."""
    pass


# === 2. Настройка движка ===
# Пример DSN: sqlite+aiosqlite:///./placely.db или postgresql+asyncpg://app:app@db:5432/app
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    pool_pre_ping=True,
)


# === 3. Сессия ===
SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# === 4. Депенденси для FastAPI и сервисов ===
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Асинхронная сессия SQLAlchemy."""
    async with SessionLocal() as session:
        yield session


async def init_db() -> None:
    """
    Dev-инициализация БД: создаём таблицы, если их нет.
    В проде используй alembic upgrade head.
    """
    # модели должны быть импортированы, чтобы попасть в metadata
    import placely.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
