# placely/domain/reminders.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional


class Category(str, enum.Enum):
    ONLINE_TEST = "Online Test"
    INTERVIEW = "Interview"
    RESUME_SUBMISSION = "Resume Submission"
    CODING_CONTEST = "Coding Contest"
    DEADLINE = "Deadline"
    OTHER = "Other"


class JobKind(str, enum.Enum):
    PRE_ALERT = "pre-alert"
    DEADLINE = "deadline"


def job_name(reminder_id: int, kind: JobKind) -> str:
    """Единственное место, где выводится имя джоба: replace и cancel обязаны совпадать."""
    return f"{JobKind(kind).value}:{reminder_id}"


DEFAULT_LEAD_TIME_MS = 3_600_000


@dataclass(frozen=True)
class Reminder:
    id: int
    title: str
    description: Optional[str]
    event_time: int  # ms since epoch
    category: str
    lead_time: int = 0  # ms; 0 — без предварительного алерта

    @property
    def pre_alert_time(self) -> Optional[int]:
        if self.lead_time <= 0:
            return None
        return self.event_time - self.lead_time

    @classmethod
    def from_row(cls, row: Any) -> "Reminder":
        return cls(
            id=row.id,
            title=row.title,
            description=row.description,
            event_time=row.event_time,
            category=row.category,
            lead_time=row.lead_time,
        )


@dataclass(frozen=True)
class ReminderDraft:
    """Снимок формы: id=0 — новое напоминание."""
    title: str
    event_time: int
    description: Optional[str] = None
    category: str = Category.ONLINE_TEST.value
    lead_time: int = DEFAULT_LEAD_TIME_MS
    id: int = 0

    @property
    def is_new(self) -> bool:
        return self.id == 0


@dataclass(frozen=True)
class AlertPayload:
    reminder_id: int
    title: str
    description: Optional[str]
    category: str
    kind: JobKind

    @classmethod
    def for_reminder(cls, reminder: Reminder, kind: JobKind) -> "AlertPayload":
        return cls(
            reminder_id=reminder.id,
            title=reminder.title,
            description=reminder.description,
            category=reminder.category,
            kind=kind,
        )

    def to_job_kwargs(self) -> dict:
        # только простые типы: джоб-стор сериализует аргументы
        return {
            "reminder_id": self.reminder_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "kind": self.kind.value,
        }

    @classmethod
    def from_job_kwargs(cls, data: dict) -> "AlertPayload":
        return cls(
            reminder_id=int(data.get("reminder_id", 0)),
            title=data.get("title") or "Reminder",
            description=data.get("description"),
            category=data.get("category") or "Event",
            kind=JobKind(data.get("kind", JobKind.PRE_ALERT.value)),
        )


@dataclass(frozen=True)
class ScheduleOutcome:
    pre_alert: bool = False
    deadline: bool = False

    @property
    def nothing_scheduled(self) -> bool:
        return not (self.pre_alert or self.deadline)
