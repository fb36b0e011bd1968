# placely/services/notification_service.py
from __future__ import annotations

import logging

from placely.domain.reminders import AlertPayload, JobKind
from placely.errors import PermissionDenied
from placely.services.alert_surface import AlertMessage, AlertSurface

logger = logging.getLogger(__name__)

ALERT_ID_OFFSET = 10000


class NotificationDispatcher:
    """
    Показывает алерт по сработавшему джобу и снимает висящие алерты.

    Видимый id: reminder_id для дедлайна и reminder_id + offset для pre-alert,
    поэтому оба алерта одного напоминания живут и снимаются независимо.
    """

    def __init__(self, surface: AlertSurface, *, offset: int = ALERT_ID_OFFSET, enabled: bool = True):
        self.surface = surface
        self.offset = offset
        self.enabled = enabled

    def alert_id_for(self, reminder_id: int, kind: JobKind) -> int:
        if kind == JobKind.DEADLINE:
            return reminder_id
        return reminder_id + self.offset

    def render(self, payload: AlertPayload) -> AlertMessage:
        if payload.kind == JobKind.DEADLINE:
            title = f"⏰ {payload.title} - NOW!"
            body = payload.description or f"Your {payload.category} is happening now!"
        else:
            title = f"🔔 Upcoming: {payload.title}"
            body = payload.description or f"You have an upcoming {payload.category}"
        return AlertMessage(
            alert_id=self.alert_id_for(payload.reminder_id, payload.kind),
            reminder_id=payload.reminder_id,
            kind=payload.kind.value,
            title=title,
            body=body,
            category=payload.category,
            open_reminder_id=payload.reminder_id,
        )

    async def deliver(self, payload: AlertPayload) -> bool:
        """False — алерт не показан (уведомления выключены или нет разрешения)."""
        alert = self.render(payload)
        ctx = {"reminder_id": payload.reminder_id, "alert_id": alert.alert_id}
        if not self.enabled:
            logger.debug("notifications disabled, skip", extra=ctx)
            return False
        try:
            await self.surface.show(alert)
        except PermissionDenied:
            logger.debug("no permission to show alert, skip", extra=ctx)
            return False
        logger.info("alert shown kind=%s", payload.kind.value, extra=ctx)
        return True

    async def dismiss(self, reminder_id: int) -> None:
        for kind in (JobKind.DEADLINE, JobKind.PRE_ALERT):
            await self.surface.cancel(self.alert_id_for(reminder_id, kind))
