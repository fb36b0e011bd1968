# placely/services/alert_surface.py
from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from aiogram.client.bot import Bot
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from placely.errors import PermissionDenied
from placely.keyboards.reminders import alert_kb
from placely.repositories.alert_repo import AlertRepo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertMessage:
    alert_id: int
    reminder_id: int
    kind: str
    title: str
    body: str
    category: str
    # тап по алерту открывает это напоминание
    open_reminder_id: int


class AlertSurface(Protocol):
    async def show(self, alert: AlertMessage) -> None: ...

    async def cancel(self, alert_id: int) -> None: ...


def category_tag(category: str) -> str:
    return "#" + "_".join(category.lower().split())


def render_html(alert: AlertMessage) -> str:
    return (
        f"<b>{html.escape(alert.title)}</b>\n"
        f"{html.escape(alert.body)}\n\n"
        f"{html.escape(category_tag(alert.category))}"
    )


class TelegramAlertSurface:
    """
    Алерты как сообщения бота в чат владельца:
      - show: шлёт сообщение с кнопкой «Open», прежнее с тем же alert_id удаляет
      - cancel: удаляет сообщение, если оно ещё висит
    Связь alert_id → (chat_id, message_id) живёт в таблице alerts,
    т.к. show и cancel вызываются из разных процессов/запусков.
    """

    def __init__(
        self,
        bot: Bot,
        session_factory: async_sessionmaker[AsyncSession],
        chat_id: Optional[int],
    ):
        self.bot = bot
        self.session_factory = session_factory
        self.chat_id = chat_id

    async def show(self, alert: AlertMessage) -> None:
        if not self.chat_id:
            raise PermissionDenied("alert chat is not configured")

        async with self.session_factory() as s:
            repo = AlertRepo(s)
            prev = await repo.get(alert.alert_id)
            if prev is not None:
                await self._delete_message(prev.chat_id, prev.message_id)

            try:
                msg = await self.bot.send_message(
                    chat_id=self.chat_id,
                    text=render_html(alert),
                    parse_mode=ParseMode.HTML,
                    reply_markup=alert_kb(alert.open_reminder_id),
                )
            except TelegramForbiddenError as e:
                # бот заблокирован пользователем — это его выбор, не сбой
                raise PermissionDenied(str(e)) from e

            await repo.put(
                alert_id=alert.alert_id,
                reminder_id=alert.reminder_id,
                kind=alert.kind,
                chat_id=self.chat_id,
                message_id=msg.message_id,
            )

    async def cancel(self, alert_id: int) -> None:
        async with self.session_factory() as s:
            repo = AlertRepo(s)
            row = await repo.get(alert_id)
            if row is None:
                return
            await self._delete_message(row.chat_id, row.message_id)
            await repo.remove(alert_id)

    async def _delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except (TelegramBadRequest, TelegramForbiddenError):
            # уже удалено руками или бот заблокирован — для MVP ок
            logger.debug("delete_message skipped chat=%s msg=%s", chat_id, message_id)
