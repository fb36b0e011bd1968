# placely/errors.py
from __future__ import annotations


class ReminderError(Exception):
    """Базовое исключение подсистемы напоминаний."""


class ValidationFailed(ReminderError):
    """Форма напоминания не прошла проверку; ничего не записано и не запланировано."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class ReminderNotFound(ReminderError):
    def __init__(self, reminder_id: int):
        super().__init__(f"reminder {reminder_id} not found")
        self.reminder_id = reminder_id


class SchedulingFailed(ReminderError):
    """
    Бэкенд джобов отказал при постановке задачи.
    Повтор — забота вызывающего: запись в БД при этом остаётся.
    """

    def __init__(self, reminder_id: int, kind):
        super().__init__(f"failed to schedule {getattr(kind, 'value', kind)} job for reminder {reminder_id}")
        self.reminder_id = reminder_id
        self.kind = kind


class PermissionDenied(ReminderError):
    """Нет права показывать алерты (бот заблокирован, чат не настроен)."""
