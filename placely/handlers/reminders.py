import html
import logging

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession

from placely.config import settings
from placely.domain.reminders import Reminder
from placely.errors import ReminderNotFound
from placely.keyboards.reminders import OPEN_PREFIX, parse_open_callback, reminders_list_kb
from placely.repositories.alert_repo import AlertRepo
from placely.services.reminder_service import ReminderService
from placely.utils.dates import format_event_time, now_ms, relative_time

router = Router(name="reminders")
logger = logging.getLogger(__name__)

LIST_LIMIT = 20


def reminder_card(r: Reminder, now: int) -> str:
    lines = [
        f"<b>{html.escape(r.title)}</b>",
        f"{html.escape(r.category)} · {format_event_time(r.event_time, settings.SCHEDULER_TZ)}",
        f"<i>{relative_time(r.event_time, now)}</i>",
    ]
    if r.description:
        lines.append("")
        lines.append(html.escape(r.description))
    return "\n".join(lines)


@router.message(Command("reminders"))
async def list_upcoming(message: Message, reminders: ReminderService) -> None:
    now = now_ms()
    items = await reminders.upcoming(now)
    if not items:
        await message.answer("No upcoming reminders.")
        return
    buttons = [
        (r.id, f"{r.title} · {relative_time(r.event_time, now)}")
        for r in items[:LIST_LIMIT]
    ]
    await message.answer("Upcoming reminders:", reply_markup=reminders_list_kb(buttons))


@router.callback_query(F.data.startswith(OPEN_PREFIX))
async def open_reminder(cb: CallbackQuery, reminders: ReminderService, session: AsyncSession) -> None:
    """Тап по алерту: показываем карточку, сам алерт снимаем (dismiss-on-tap)."""
    rid = parse_open_callback(cb.data)
    if rid is None:
        await cb.answer()
        return

    try:
        reminder = await reminders.get(rid)
    except ReminderNotFound:
        await cb.answer("Reminder was deleted", show_alert=True)
        return

    if cb.message is not None:
        alerts = AlertRepo(session)
        row = await alerts.find_by_message(cb.message.chat.id, cb.message.message_id)
        if row is not None:
            try:
                await cb.message.delete()
            except TelegramBadRequest:
                logger.debug("alert message already gone", extra={"alert_id": row.alert_id})
            await alerts.remove(row.alert_id)
        await cb.message.answer(reminder_card(reminder, now_ms()))

    await cb.answer()
