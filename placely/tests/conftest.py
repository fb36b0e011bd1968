import os

# до импорта placely.*: движок создаётся при импорте placely.db
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BOT_TOKEN", "42:TEST")

from dataclasses import replace  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import placely.models  # noqa: E402,F401
from placely.db import Base  # noqa: E402
from placely.domain.reminders import Reminder, ReminderDraft  # noqa: E402
from placely.errors import PermissionDenied  # noqa: E402
from placely.services.notification_service import NotificationDispatcher  # noqa: E402
from placely.services.scheduling_service import ReminderScheduler  # noqa: E402

T = 1_800_000_000_000  # фиксированный момент события, ms
HOUR = 3_600_000


class FakeJobBackend:
    """Джоб-бэкенд в памяти: одно имя — один джоб, как у APScheduler с replace_existing."""

    def __init__(self):
        self.jobs: dict[str, tuple[int, dict]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_enqueue: set[str] = set()
        self.fail_cancel = False

    async def enqueue_unique(self, name: str, delay_ms: int, payload: dict) -> None:
        self.calls.append(("replace" if name in self.jobs else "enqueue", name))
        if name in self.fail_enqueue:
            raise RuntimeError("backend not ready")
        self.jobs[name] = (delay_ms, payload)

    async def cancel_unique(self, name: str) -> None:
        self.calls.append(("cancel", name))
        if self.fail_cancel:
            raise RuntimeError("backend not ready")
        self.jobs.pop(name, None)


class FakeSurface:
    def __init__(self):
        self.visible: dict = {}
        self.cancelled: list[int] = []
        self.deny = False

    async def show(self, alert) -> None:
        if self.deny:
            raise PermissionDenied("blocked")
        self.visible[alert.alert_id] = alert

    async def cancel(self, alert_id: int) -> None:
        self.cancelled.append(alert_id)
        self.visible.pop(alert_id, None)


class FakeReminderRepo:
    """Стор в памяти с тем же контрактом, что и ReminderRepo."""

    def __init__(self):
        self.rows: dict[int, Reminder] = {}
        self._next_id = 1

    async def insert(self, draft: ReminderDraft) -> int:
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = Reminder(
            id=rid,
            title=draft.title,
            description=draft.description,
            event_time=draft.event_time,
            category=draft.category,
            lead_time=draft.lead_time,
        )
        return rid

    async def update(self, reminder: Reminder) -> bool:
        if reminder.id not in self.rows:
            return False
        self.rows[reminder.id] = replace(reminder)
        return True

    async def delete(self, reminder: Reminder) -> None:
        self.rows.pop(reminder.id, None)

    async def get_by_id(self, rid: int):
        return self.rows.get(rid)

    async def get_all(self):
        return sorted(self.rows.values(), key=lambda r: (r.event_time, r.id))

    async def upcoming(self, now: int):
        return [r for r in await self.get_all() if r.event_time >= now]


@pytest.fixture
def backend():
    return FakeJobBackend()


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def dispatcher(surface):
    return NotificationDispatcher(surface, offset=10000)


@pytest.fixture
def coordinator(backend, dispatcher):
    return ReminderScheduler(backend, dispatcher)


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


def make_reminder(**kw) -> Reminder:
    data = dict(
        id=7,
        title="System design round",
        description=None,
        event_time=T,
        category="Interview",
        lead_time=HOUR,
    )
    data.update(kw)
    return Reminder(**data)
