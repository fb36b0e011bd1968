import logging
from dataclasses import replace
from typing import Optional

from placely.domain.reminders import Category, Reminder, ReminderDraft
from placely.errors import ReminderNotFound, SchedulingFailed, ValidationFailed
from placely.repositories.reminder_repo import ReminderRepo
from placely.services.scheduling_service import ReminderScheduler
from placely.utils.dates import now_ms

logger = logging.getLogger(__name__)

CATEGORIES = frozenset(c.value for c in Category)


def validate_draft(draft: ReminderDraft) -> ReminderDraft:
    """Проверка формы и нормализация (trim). Бросает ValidationFailed."""
    title = (draft.title or "").strip()
    if not title:
        raise ValidationFailed("title", "title must not be empty")
    if draft.lead_time < 0:
        raise ValidationFailed("lead_time", "lead time must be non-negative")
    if draft.category not in CATEGORIES:
        raise ValidationFailed("category", f"unknown category {draft.category!r}")
    if draft.id < 0:
        raise ValidationFailed("id", "id must be 0 (new) or an existing reminder id")
    description = draft.description.strip() if draft.description is not None else None
    return replace(draft, title=title, description=description)


class ReminderService:
    """
    Сохранение/удаление напоминаний вместе с их джобами.
    Запись в БД — источник правды; джобы всегда выводятся из неё.
    """

    def __init__(self, repo: ReminderRepo, scheduler: ReminderScheduler):
        self.repo = repo
        self.scheduler = scheduler

    async def save(self, draft: ReminderDraft, now: Optional[int] = None) -> Reminder:
        draft = validate_draft(draft)

        if draft.is_new:
            rid = await self.repo.insert(draft)
            reminder = Reminder(
                id=rid,
                title=draft.title,
                description=draft.description,
                event_time=draft.event_time,
                category=draft.category,
                lead_time=draft.lead_time,
            )
        else:
            reminder = Reminder(
                id=draft.id,
                title=draft.title,
                description=draft.description,
                event_time=draft.event_time,
                category=draft.category,
                lead_time=draft.lead_time,
            )
            if await self.repo.get_by_id(draft.id) is None:
                raise ReminderNotFound(draft.id)
            # правка = cancel, затем update и schedule: если отмена упала,
            # запись остаётся старой и совпадает с живыми джобами
            await self.scheduler.cancel(reminder.id)
            if not await self.repo.update(reminder):
                raise ReminderNotFound(draft.id)

        try:
            await self.scheduler.schedule(reminder, now)
        except SchedulingFailed as e:
            # запись не откатываем: напоминание корректно, но без этого джоба до resync
            logger.warning(
                "schedule failed kind=%s, record kept", e.kind.value,
                extra={"reminder_id": reminder.id},
                exc_info=True,
            )
        return reminder

    async def delete(self, reminder_id: int) -> None:
        """
        Сначала отмена джобов, потом удаление записи.
        Если отмена упала — запись остаётся, и отмену можно повторить.
        """
        await self.scheduler.cancel(reminder_id)
        reminder = await self.repo.get_by_id(reminder_id)
        if reminder is None:
            return
        await self.repo.delete(reminder)
        logger.info("deleted", extra={"reminder_id": reminder_id})

    async def get(self, reminder_id: int) -> Reminder:
        reminder = await self.repo.get_by_id(reminder_id)
        if reminder is None:
            raise ReminderNotFound(reminder_id)
        return reminder

    async def list_all(self) -> list[Reminder]:
        return await self.repo.get_all()

    async def upcoming(self, now: Optional[int] = None) -> list[Reminder]:
        return await self.repo.upcoming(now_ms() if now is None else now)

    async def resync(self, now: Optional[int] = None) -> int:
        """
        Сверка при старте: заново ставим джобы всем будущим напоминаниям.
        Замена по имени делает проход идемпотентным.
        Возвращает число напоминаний, для которых что-то поставилось.
        """
        if now is None:
            now = now_ms()
        scheduled = 0
        for reminder in await self.repo.upcoming(now):
            try:
                outcome = await self.scheduler.schedule(reminder, now)
            except SchedulingFailed:
                logger.warning("resync: schedule failed", extra={"reminder_id": reminder.id}, exc_info=True)
                continue
            if not outcome.nothing_scheduled:
                scheduled += 1
        logger.info("resync done: %s reminder(s) scheduled", scheduled)
        return scheduled
