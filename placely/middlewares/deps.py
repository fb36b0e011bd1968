from typing import Any, Callable, Dict, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from placely.repositories.reminder_repo import ReminderRepo
from placely.services.reminder_service import ReminderService
from placely.services.scheduling_service import ReminderScheduler


class DepsMiddleware(BaseMiddleware):
    """
    Сессия БД — своя на каждый апдейт: AsyncSession нельзя делить между конкурентными задачами.
    Координатор джобов общий, своего состояния у него нет.
    """

    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession], scheduling: ReminderScheduler) -> None:
        self.session_factory = session_factory
        self.scheduling = scheduling

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        async with self.session_factory() as session:
            # Инжектим по тем ключам, которые ждут хендлеры
            # Пример: async def open_reminder(cb: CallbackQuery, reminders: ReminderService, session: AsyncSession)
            data["session"] = session
            data["scheduling"] = self.scheduling
            data["reminders"] = ReminderService(ReminderRepo(session), self.scheduling)
            return await handler(event, data)
