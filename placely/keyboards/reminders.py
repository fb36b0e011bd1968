from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

OPEN_PREFIX = "reminder:open:"


def open_callback(reminder_id: int) -> str:
    return f"{OPEN_PREFIX}{reminder_id}"


def parse_open_callback(data: str | None) -> int | None:
    if not data or not data.startswith(OPEN_PREFIX):
        return None
    try:
        return int(data[len(OPEN_PREFIX):])
    except ValueError:
        return None


def alert_kb(reminder_id: int) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="Open", callback_data=open_callback(reminder_id))
    return kb.as_markup()


def reminders_list_kb(items: list[tuple[int, str]]) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for rid, label in items:
        kb.button(text=label, callback_data=open_callback(rid))
    kb.adjust(1)
    return kb.as_markup()
