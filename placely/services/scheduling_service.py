# placely/services/scheduling_service.py
from __future__ import annotations

import logging
from typing import Optional

from placely.domain.reminders import AlertPayload, JobKind, Reminder, ScheduleOutcome, job_name
from placely.errors import SchedulingFailed
from placely.scheduler.backend import JobBackend
from placely.services.notification_service import NotificationDispatcher
from placely.utils.dates import now_ms

logger = logging.getLogger("placely.scheduling")


class ReminderScheduler:
    """
    Переводит напоминание в два отложенных джоба:
      - pre-alert в event_time - lead_time (если lead_time > 0)
      - deadline ровно в event_time
    Имена джобов — единственный общий ресурс; ставит и снимает их только этот класс.
    """

    def __init__(self, backend: JobBackend, dispatcher: NotificationDispatcher):
        self.backend = backend
        self.dispatcher = dispatcher

    async def schedule(self, reminder: Reminder, now: Optional[int] = None) -> ScheduleOutcome:
        """
        Ставит (или заменяет) джобы напоминания.
        Прошедшие моменты пропускаются: задержка <= 0 не ставится никогда.
        Полностью прошедшее напоминание — валидный исход, а не ошибка.
        """
        if reminder.id <= 0:
            raise ValueError("cannot schedule an unsaved reminder (id must be assigned)")
        if now is None:
            now = now_ms()

        pre_alert = False
        deadline = False
        failed: list[SchedulingFailed] = []

        # джобы независимы: сбой pre-alert не должен оставить напоминание без дедлайна
        pre_alert_time = reminder.pre_alert_time
        if pre_alert_time is not None:
            if pre_alert_time > now:
                try:
                    await self._enqueue(reminder, JobKind.PRE_ALERT, pre_alert_time - now)
                    pre_alert = True
                except SchedulingFailed as e:
                    failed.append(e)
            else:
                logger.debug(
                    "pre-alert time already passed, skip",
                    extra={"reminder_id": reminder.id, "job": job_name(reminder.id, JobKind.PRE_ALERT)},
                )

        if reminder.event_time > now:
            try:
                await self._enqueue(reminder, JobKind.DEADLINE, reminder.event_time - now)
                deadline = True
            except SchedulingFailed as e:
                failed.append(e)
        else:
            logger.debug(
                "event time already passed, skip",
                extra={"reminder_id": reminder.id, "job": job_name(reminder.id, JobKind.DEADLINE)},
            )

        outcome = ScheduleOutcome(pre_alert=pre_alert, deadline=deadline)
        logger.info(
            "scheduled pre_alert=%s deadline=%s", outcome.pre_alert, outcome.deadline,
            extra={"reminder_id": reminder.id},
        )
        if failed:
            raise failed[0]
        return outcome

    async def cancel(self, reminder_id: int) -> None:
        """Снимает оба джоба и висящие алерты. Отмена несуществующего — no-op."""
        for kind in (JobKind.PRE_ALERT, JobKind.DEADLINE):
            await self.backend.cancel_unique(job_name(reminder_id, kind))
        await self.dispatcher.dismiss(reminder_id)
        logger.info("cancelled", extra={"reminder_id": reminder_id})

    async def _enqueue(self, reminder: Reminder, kind: JobKind, delay_ms: int) -> None:
        name = job_name(reminder.id, kind)
        payload = AlertPayload.for_reminder(reminder, kind).to_job_kwargs()
        try:
            await self.backend.enqueue_unique(name, delay_ms, payload)
        except Exception as e:
            # без ретраев: только вызывающий знает, что делать с записью
            raise SchedulingFailed(reminder.id, kind) from e
        logger.debug("enqueued delay_ms=%s", delay_ms, extra={"reminder_id": reminder.id, "job": name})
