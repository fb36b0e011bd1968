from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from placely.config import settings
from placely.domain.reminders import Category, Reminder, ReminderDraft


class ReminderIn(BaseModel):
    title: str
    description: Optional[str] = None
    event_time: int = Field(description="ms since epoch")
    category: str = Category.ONLINE_TEST.value
    lead_time: int = Field(default_factory=lambda: settings.DEFAULT_LEAD_TIME_MS, description="ms before event")

    def to_draft(self, reminder_id: int = 0) -> ReminderDraft:
        return ReminderDraft(
            id=reminder_id,
            title=self.title,
            description=self.description,
            event_time=self.event_time,
            category=self.category,
            lead_time=self.lead_time,
        )


class ReminderOut(BaseModel):
    id: int
    title: str
    description: Optional[str]
    event_time: int
    category: str
    lead_time: int

    @classmethod
    def of(cls, r: Reminder) -> "ReminderOut":
        return cls(
            id=r.id,
            title=r.title,
            description=r.description,
            event_time=r.event_time,
            category=r.category,
            lead_time=r.lead_time,
        )
