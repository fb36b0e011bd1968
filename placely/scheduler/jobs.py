# placely/scheduler/jobs.py
from __future__ import annotations

import enum
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from aiogram import Bot
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from placely.config import settings
from placely.db import SessionLocal
from placely.domain.reminders import AlertPayload
from placely.services.alert_surface import TelegramAlertSurface
from placely.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


class JobResult(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@asynccontextmanager
async def _dispatcher_from_settings() -> AsyncIterator[NotificationDispatcher]:
    """
    Диспетчер собирается заново на каждый запуск джоба:
    джоб мог пережить рестарт, в памяти ничего от постановщика нет.
    """
    bot = Bot(token=settings.BOT_TOKEN)
    try:
        surface = TelegramAlertSurface(bot, SessionLocal, settings.ALERT_CHAT_ID)
        yield NotificationDispatcher(
            surface,
            offset=settings.ALERT_ID_OFFSET,
            enabled=settings.NOTIFICATIONS_ENABLED,
        )
    finally:
        await bot.session.close()


async def fire_reminder_job(name: str, payload: dict) -> JobResult:
    """
    Точка входа APScheduler для pre-alert и deadline джобов.
    Ошибки не пробрасываем: джоб одноразовый, ретраев нет — только лог.
    """
    try:
        alert = AlertPayload.from_job_kwargs(payload)
        async with _dispatcher_from_settings() as dispatcher:
            await dispatcher.deliver(alert)
    except Exception:
        logger.exception("fire failed", extra={"job": name, "reminder_id": payload.get("reminder_id", "-")})
        return JobResult.FAILURE
    logger.info("fired", extra={"job": name, "reminder_id": alert.reminder_id})
    return JobResult.SUCCESS


def build_scheduler() -> AsyncIOScheduler:
    """
    Планировщик с персистентным хранилищем джобов.
    Вызывается один раз при старте приложения.
    """
    return AsyncIOScheduler(
        jobstores={
            "default": SQLAlchemyJobStore(url=settings.JOBSTORE_URL, tablename="scheduled_jobs"),
        },
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            # если проспали (процесс лежал), отработаем при старте в пределах окна
            "misfire_grace_time": settings.MISFIRE_GRACE_SECONDS,
        },
        timezone=settings.SCHEDULER_TZ,
    )
