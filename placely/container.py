# placely/container.py
from __future__ import annotations

from aiogram import Bot, Dispatcher
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import AsyncSession

from placely.config import settings
from placely.db import SessionLocal

from placely.repositories.reminder_repo import ReminderRepo

from placely.scheduler.backend import APSchedulerJobBackend
from placely.services.alert_surface import TelegramAlertSurface
from placely.services.notification_service import NotificationDispatcher
from placely.services.reminder_service import ReminderService
from placely.services.scheduling_service import ReminderScheduler


async def build_dp(bot: Bot) -> Dispatcher:
    """
    Собираем Dispatcher для aiogram 3.x.
    FSM не используется, хватает MemoryStorage по умолчанию.
    """
    return Dispatcher()


def build_dispatcher(bot: Bot) -> NotificationDispatcher:
    surface = TelegramAlertSurface(bot, SessionLocal, settings.ALERT_CHAT_ID)
    return NotificationDispatcher(
        surface,
        offset=settings.ALERT_ID_OFFSET,
        enabled=settings.NOTIFICATIONS_ENABLED,
    )


async def build_services(bot: Bot, session: AsyncSession, scheduler: AsyncIOScheduler):
    """
    Единая сборка сервисов. Возвращаем словарь.
    """
    # repos
    reminders_repo = ReminderRepo(session)

    # services
    dispatcher = build_dispatcher(bot)
    coordinator = ReminderScheduler(APSchedulerJobBackend(scheduler), dispatcher)
    reminders_svc = ReminderService(reminders_repo, coordinator)

    return {
        "reminders": reminders_svc,
        "scheduling": coordinator,
    }
