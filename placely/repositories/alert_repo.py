from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from placely.models.alert import Alert


class AlertRepo:
    def __init__(self, s: AsyncSession):
        self.s = s

    async def get(self, alert_id: int) -> Alert | None:
        q = await self.s.execute(select(Alert).where(Alert.alert_id == alert_id))
        return q.scalar_one_or_none()

    async def put(self, alert_id: int, reminder_id: int, kind: str, chat_id: int, message_id: int) -> None:
        """Один алерт на alert_id: старую строку заменяем."""
        await self.s.merge(
            Alert(
                alert_id=alert_id,
                reminder_id=reminder_id,
                kind=kind,
                chat_id=chat_id,
                message_id=message_id,
            )
        )
        await self.s.commit()

    async def remove(self, alert_id: int) -> None:
        await self.s.execute(delete(Alert).where(Alert.alert_id == alert_id))
        await self.s.commit()

    async def find_by_message(self, chat_id: int, message_id: int) -> Alert | None:
        q = await self.s.execute(
            select(Alert).where(Alert.chat_id == chat_id, Alert.message_id == message_id)
        )
        return q.scalars().first()
