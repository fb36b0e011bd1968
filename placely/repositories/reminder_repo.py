from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete

from placely.domain.reminders import Reminder, ReminderDraft
from placely.models.reminder import Reminder as ReminderRow


class ReminderRepo:
    def __init__(self, s: AsyncSession):
        self.s = s

    async def insert(self, draft: ReminderDraft) -> int:
        r = ReminderRow(
            title=draft.title,
            description=draft.description,
            event_time=draft.event_time,
            category=draft.category,
            lead_time=draft.lead_time,
        )
        self.s.add(r)
        await self.s.commit()
        await self.s.refresh(r)
        return r.id

    async def update(self, reminder: Reminder) -> bool:
        """Перезаписывает запись по id. False — такой записи нет."""
        res = await self.s.execute(
            update(ReminderRow)
            .where(ReminderRow.id == reminder.id)
            .values(
                title=reminder.title,
                description=reminder.description,
                event_time=reminder.event_time,
                category=reminder.category,
                lead_time=reminder.lead_time,
            )
        )
        await self.s.commit()
        return (res.rowcount or 0) > 0

    async def delete(self, reminder: Reminder) -> None:
        await self.s.execute(delete(ReminderRow).where(ReminderRow.id == reminder.id))
        await self.s.commit()

    async def get_by_id(self, rid: int) -> Reminder | None:
        q = await self.s.execute(select(ReminderRow).where(ReminderRow.id == rid))
        row = q.scalar_one_or_none()
        return Reminder.from_row(row) if row else None

    async def get_all(self) -> list[Reminder]:
        q = await self.s.execute(select(ReminderRow).order_by(ReminderRow.event_time.asc(), ReminderRow.id))
        return [Reminder.from_row(r) for r in q.scalars().all()]

    async def upcoming(self, now: int) -> list[Reminder]:
        q = await self.s.execute(
            select(ReminderRow)
            .where(ReminderRow.event_time >= now)
            .order_by(ReminderRow.event_time.asc(), ReminderRow.id)
        )
        return [Reminder.from_row(r) for r in q.scalars().all()]
