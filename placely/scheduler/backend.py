# placely/scheduler/backend.py
"""
Граница с APScheduler.

Сервисы работают только с JobBackend (enqueue_unique / cancel_unique);
реализация на APScheduler скрыта и в тестах подменяется фейком.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from placely.utils.dates import now_utc

logger = logging.getLogger(__name__)

# Ссылка строкой: персистентный джоб-стор хранит функцию по имени,
# а не объект — после рестарта процесса она импортируется заново.
FIRE_JOB_REF = "placely.scheduler.jobs:fire_reminder_job"


class JobBackend(Protocol):
    async def enqueue_unique(self, name: str, delay_ms: int, payload: dict) -> None: ...

    async def cancel_unique(self, name: str) -> None: ...


class APSchedulerJobBackend:
    """
    Отложенные одноразовые джобы по уникальному имени:
      - enqueue_unique: add_job(replace_existing=True) — атомарная замена по id
      - cancel_unique: remove_job, отсутствие джоба — не ошибка
    """

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        func: str | Callable = FIRE_JOB_REF,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.scheduler = scheduler
        self.func = func
        self.clock = clock

    # add_job/remove_job синхронные: с SQLAlchemyJobStore это блокирующий запрос к БД прямо в event loop
    async def enqueue_unique(self, name: str, delay_ms: int, payload: dict) -> None:
        if delay_ms <= 0:
            raise ValueError(f"non-positive delay for job {name}: {delay_ms}")
        run_date = self.clock() + timedelta(milliseconds=delay_ms)
        self.scheduler.add_job(
            self.func,
            trigger=DateTrigger(run_date=run_date),
            id=name,
            name=name,
            kwargs={"name": name, "payload": dict(payload)},
            replace_existing=True,
        )
        logger.debug("job enqueued run_date=%s", run_date.isoformat(), extra={"job": name})

    async def cancel_unique(self, name: str) -> None:
        try:
            self.scheduler.remove_job(name)
        except JobLookupError:
            # уже отработал или не ставился — для отмены это успех
            logger.debug("cancel: no such job", extra={"job": name})
            return
        logger.debug("job cancelled", extra={"job": name})
