import pytest

from placely.domain.reminders import ReminderDraft
from placely.errors import ReminderNotFound, ValidationFailed
from placely.repositories.reminder_repo import ReminderRepo
from placely.services.reminder_service import ReminderService

from conftest import HOUR, T

NOW = T - 2 * HOUR


@pytest.fixture
def repo(session):
    return ReminderRepo(session)


@pytest.fixture
def service(repo, coordinator):
    return ReminderService(repo, coordinator)


def draft(**kw) -> ReminderDraft:
    data = dict(title="Amazon OA", event_time=T, category="Online Test", lead_time=HOUR)
    data.update(kw)
    return ReminderDraft(**data)


async def test_save_new_assigns_id_and_schedules(service, repo, backend):
    saved = await service.save(draft(), now=NOW)

    assert saved.id > 0
    assert await repo.get_by_id(saved.id) == saved
    assert set(backend.jobs) == {f"pre-alert:{saved.id}", f"deadline:{saved.id}"}


async def test_save_trims_title_and_description(service):
    saved = await service.save(draft(title="  Amazon OA ", description="  hackerrank  "), now=NOW)

    assert saved.title == "Amazon OA"
    assert saved.description == "hackerrank"


async def test_empty_description_stays_distinct_from_none(service):
    saved = await service.save(draft(description=""), now=NOW)

    assert saved.description == ""


@pytest.mark.parametrize(
    "bad, field",
    [
        (dict(title="   "), "title"),
        (dict(lead_time=-1), "lead_time"),
        (dict(category="Party"), "category"),
    ],
)
async def test_invalid_draft_touches_nothing(service, repo, backend, bad, field):
    with pytest.raises(ValidationFailed) as ei:
        await service.save(draft(**bad), now=NOW)

    assert ei.value.field == field
    assert await repo.get_all() == []
    assert backend.calls == []


async def test_edit_reschedules_against_new_time(service, backend):
    saved = await service.save(draft(), now=NOW)

    await service.save(draft(id=saved.id, event_time=T + 3 * HOUR, lead_time=0), now=NOW)

    assert set(backend.jobs) == {f"deadline:{saved.id}"}
    assert backend.jobs[f"deadline:{saved.id}"][0] == 5 * HOUR


async def test_edit_to_past_time_leaves_no_jobs(service, backend, repo):
    saved = await service.save(draft(), now=NOW)

    edited = await service.save(draft(id=saved.id, event_time=NOW - HOUR), now=NOW)

    assert backend.jobs == {}
    assert (await repo.get_by_id(saved.id)).event_time == edited.event_time


async def test_edit_unknown_id_raises(service, backend):
    with pytest.raises(ReminderNotFound):
        await service.save(draft(id=404), now=NOW)
    assert backend.calls == []


async def test_edit_keeps_old_record_when_cancel_fails(service, repo, backend):
    saved = await service.save(draft(), now=NOW)
    old_jobs = dict(backend.jobs)
    backend.fail_cancel = True

    with pytest.raises(RuntimeError):
        await service.save(draft(id=saved.id, event_time=T + 5 * HOUR, lead_time=0), now=NOW)

    # запись и джобы по-прежнему согласованы: обе от старого event_time
    assert await repo.get_by_id(saved.id) == saved
    assert backend.jobs == old_jobs


async def test_scheduling_failure_keeps_record(service, repo, backend):
    backend.fail_enqueue.add("deadline:1")

    saved = await service.save(draft(), now=NOW)

    assert saved.id == 1
    assert await repo.get_by_id(1) is not None
    assert "deadline:1" not in backend.jobs


async def test_delete_cancels_before_removing(service, repo, backend, surface):
    saved = await service.save(draft(), now=NOW)

    await service.delete(saved.id)

    assert await repo.get_by_id(saved.id) is None
    assert backend.jobs == {}
    assert sorted(surface.cancelled) == [saved.id, saved.id + 10000]


async def test_delete_keeps_record_when_cancel_fails(service, repo, backend):
    saved = await service.save(draft(), now=NOW)
    backend.fail_cancel = True

    with pytest.raises(RuntimeError):
        await service.delete(saved.id)

    assert await repo.get_by_id(saved.id) is not None


async def test_delete_missing_record_is_noop(service, backend):
    await service.delete(12345)

    assert ("cancel", "deadline:12345") in backend.calls


async def test_list_all_is_ordered_by_event_time(service):
    await service.save(draft(title="late", event_time=T + HOUR), now=NOW)
    await service.save(draft(title="early", event_time=T - HOUR), now=NOW)

    assert [r.title for r in await service.list_all()] == ["early", "late"]


async def test_upcoming_filters_past(service):
    await service.save(draft(title="past", event_time=NOW - HOUR), now=NOW)
    await service.save(draft(title="future", event_time=T), now=NOW)

    assert [r.title for r in await service.upcoming(NOW)] == ["future"]


async def test_resync_reschedules_future_reminders_only(service, backend):
    await service.save(draft(title="past", event_time=NOW - HOUR), now=NOW)
    future = await service.save(draft(title="future"), now=NOW)
    backend.jobs.clear()

    count = await service.resync(now=NOW)

    assert count == 1
    assert set(backend.jobs) == {f"pre-alert:{future.id}", f"deadline:{future.id}"}


async def test_resync_continues_after_failure(service, backend):
    first = await service.save(draft(title="a"), now=NOW)
    second = await service.save(draft(title="b", event_time=T + HOUR), now=NOW)
    backend.jobs.clear()
    backend.fail_enqueue.add(f"pre-alert:{first.id}")

    count = await service.resync(now=NOW)

    assert count == 1
    assert f"deadline:{second.id}" in backend.jobs
    assert f"deadline:{first.id}" in backend.jobs


async def test_get_missing_raises(service):
    with pytest.raises(ReminderNotFound):
        await service.get(1)
