import pytest

from placely.domain.reminders import JobKind, ScheduleOutcome
from placely.errors import SchedulingFailed

from conftest import HOUR, T, make_reminder


async def test_lead_time_two_hours_ahead_schedules_both_jobs(coordinator, backend):
    outcome = await coordinator.schedule(make_reminder(), now=T - 2 * HOUR)

    assert outcome == ScheduleOutcome(pre_alert=True, deadline=True)
    assert backend.jobs["pre-alert:7"][0] == HOUR
    assert backend.jobs["deadline:7"][0] == 2 * HOUR


async def test_pre_alert_in_the_past_is_skipped(coordinator, backend):
    outcome = await coordinator.schedule(make_reminder(), now=T - HOUR // 2)

    assert outcome == ScheduleOutcome(pre_alert=False, deadline=True)
    assert set(backend.jobs) == {"deadline:7"}
    assert backend.jobs["deadline:7"][0] == HOUR // 2


async def test_zero_lead_time_schedules_deadline_only(coordinator, backend):
    outcome = await coordinator.schedule(make_reminder(lead_time=0), now=T - 5 * HOUR)

    assert outcome == ScheduleOutcome(pre_alert=False, deadline=True)
    assert list(backend.jobs) == ["deadline:7"]


@pytest.mark.parametrize("now", [T, T + 1, T + 10 * HOUR])
async def test_past_event_schedules_nothing(coordinator, backend, now):
    outcome = await coordinator.schedule(make_reminder(), now=now)

    assert outcome.nothing_scheduled
    assert backend.jobs == {}


async def test_pre_alert_exactly_now_is_not_scheduled(coordinator, backend):
    outcome = await coordinator.schedule(make_reminder(), now=T - HOUR)

    assert not outcome.pre_alert
    assert outcome.deadline


async def test_payload_carries_reminder_fields_and_kind(coordinator, backend):
    await coordinator.schedule(make_reminder(description="Bring CV"), now=T - 2 * HOUR)

    _, payload = backend.jobs["pre-alert:7"]
    assert payload == {
        "reminder_id": 7,
        "title": "System design round",
        "description": "Bring CV",
        "category": "Interview",
        "kind": "pre-alert",
    }
    assert backend.jobs["deadline:7"][1]["kind"] == JobKind.DEADLINE.value


async def test_schedule_twice_replaces_instead_of_duplicating(coordinator, backend):
    reminder = make_reminder()
    await coordinator.schedule(reminder, now=T - 2 * HOUR)
    await coordinator.schedule(reminder, now=T - 2 * HOUR)

    assert sorted(backend.jobs) == ["deadline:7", "pre-alert:7"]
    assert backend.calls[2:] == [("replace", "pre-alert:7"), ("replace", "deadline:7")]


async def test_unsaved_reminder_is_rejected(coordinator, backend):
    with pytest.raises(ValueError):
        await coordinator.schedule(make_reminder(id=0), now=T - HOUR)
    assert backend.calls == []


async def test_backend_failure_surfaces_as_scheduling_failed(coordinator, backend):
    backend.fail_enqueue.add("deadline:7")

    with pytest.raises(SchedulingFailed) as ei:
        await coordinator.schedule(make_reminder(), now=T - 2 * HOUR)

    assert ei.value.reminder_id == 7
    assert ei.value.kind == JobKind.DEADLINE
    # без ретраев
    assert [c for c in backend.calls if c[1] == "deadline:7"] == [("enqueue", "deadline:7")]


async def test_cancel_removes_both_jobs_and_dismisses_alerts(coordinator, backend, surface):
    await coordinator.schedule(make_reminder(), now=T - 2 * HOUR)

    await coordinator.cancel(7)

    assert backend.jobs == {}
    assert sorted(surface.cancelled) == [7, 10007]


async def test_cancel_unknown_reminder_is_noop(coordinator, backend, surface):
    await coordinator.cancel(99)
    await coordinator.cancel(99)

    assert backend.jobs == {}
    assert surface.cancelled == [99, 10099, 99, 10099]


async def test_cancel_then_schedule_leaves_only_new_jobs(coordinator, backend):
    await coordinator.schedule(make_reminder(), now=T - 2 * HOUR)

    moved = make_reminder(event_time=T + 5 * HOUR, lead_time=0)
    await coordinator.cancel(7)
    await coordinator.schedule(moved, now=T - 2 * HOUR)

    assert backend.jobs == {"deadline:7": (7 * HOUR, backend.jobs["deadline:7"][1])}


async def test_pre_alert_failure_still_schedules_deadline(coordinator, backend):
    backend.fail_enqueue.add("pre-alert:7")

    with pytest.raises(SchedulingFailed) as ei:
        await coordinator.schedule(make_reminder(), now=T - 2 * HOUR)

    assert ei.value.kind == JobKind.PRE_ALERT
    assert set(backend.jobs) == {"deadline:7"}
    assert backend.jobs["deadline:7"][0] == 2 * HOUR
