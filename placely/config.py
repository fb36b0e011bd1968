from __future__ import annotations
from typing import Optional

from pydantic import Field, AliasChoices, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _to_sync_dsn(dsn: str) -> str:
    """APScheduler SQLAlchemyJobStore работает только с синхронным движком."""
    for async_driver, sync_driver in (
        ("+aiosqlite", ""),
        ("+asyncpg", "+psycopg"),
        ("+aiopg", "+psycopg"),
    ):
        if async_driver in dsn:
            return dsn.replace(async_driver, sync_driver)
    return dsn


class Settings(BaseSettings):
    # === Telegram ===
    BOT_TOKEN: str = ""
    OWNER_ID: Optional[int] = None
    # Куда слать алерты; если не задано — берём OWNER_ID
    ALERT_CHAT_ID: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("ALERT_CHAT_ID", "NOTIFY_CHAT_ID"),
    )

    # === Storage / DB ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./placely.db"
    # Хранилище джобов планировщика; по умолчанию та же БД, но sync-драйвер
    JOBSTORE_URL: Optional[str] = None

    # === Планировщик / напоминания ===
    SCHEDULER_TZ: str = "UTC"
    MISFIRE_GRACE_SECONDS: int = 3600
    RESYNC_ON_START: bool = True

    # === Алерты ===
    NOTIFICATIONS_ENABLED: bool = True
    ALERT_ID_OFFSET: int = 10000
    DEFAULT_LEAD_TIME_MS: int = 3_600_000  # час до события

    # === Веб-приложение (в том же процессе, что и бот) ===
    WEBAPP_ENABLED: bool = True  # создавать и править напоминания можно только через API
    WEBAPP_HOST: str = "0.0.0.0"
    WEBAPP_PORT: int = 8080

    # === Отладка SQL ===
    SQL_ECHO: bool = False

    # === Логи ===
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    log_sql: str = Field(default="WARNING", alias="LOG_SQL")
    log_aiogram: str = Field(default="INFO", alias="LOG_AIOGRAM")

    # ---- валидаторы ДО валидации типов ----
    @field_validator("ALERT_CHAT_ID", "OWNER_ID", mode="before")
    @classmethod
    def _v_empty_int(cls, v):
        if v == "":
            return None
        return v

    @field_validator("ALERT_ID_OFFSET")
    @classmethod
    def _v_offset(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("ALERT_ID_OFFSET должен быть положительным")
        return v

    # ---- пост-обработчик ----
    @model_validator(mode="after")
    def _backfill(self):
        if self.ALERT_CHAT_ID is None and self.OWNER_ID:
            self.ALERT_CHAT_ID = self.OWNER_ID
        if not self.JOBSTORE_URL:
            self.JOBSTORE_URL = _to_sync_dsn(self.DATABASE_URL)
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
