"""Daily progress updates."""
from datetime import date

import pytest

from projecteye.exceptions import ConflictError, NotFoundError
from projecteye.models.milestone import MilestoneStatus
from projecteye.schemas.milestone import MilestoneCreate
from projecteye.schemas.progress import ProgressUpdateCreate, ProgressUpdateUpdate
from projecteye.services import milestone_service, progress_service


def report(on, **kw):
    return ProgressUpdateCreate(date=on, work_description=kw.pop("work_description", "Work"), **kw)


async def test_one_update_per_day(db, owner, project):
    await progress_service.create_progress_update(db, project.id, report(date(2024, 3, 1)), owner)
    with pytest.raises(ConflictError):
        await progress_service.create_progress_update(db, project.id, report(date(2024, 3, 1)), owner)
    await progress_service.create_progress_update(db, project.id, report(date(2024, 3, 2)), owner)


async def test_unknown_milestone(db, owner, project):
    with pytest.raises(NotFoundError):
        await progress_service.create_progress_update(
            db, project.id, report(date(2024, 3, 1), milestone_id="missing"), owner
        )


async def test_create_with_milestone_starts_it(db, owner, project):
    milestone = await milestone_service.create_milestone(db, project.id, MilestoneCreate(
        name="Foundation", order=1, planned_start=date(2024, 3, 1), planned_end=date(2024, 3, 21),
    ))
    update = await progress_service.create_progress_update(
        db, project.id, report(date(2024, 3, 4), milestone_id=milestone.id, workers_count=12,
                               weather_conditions="sunny"), owner
    )
    assert update.reported_by == owner.id
    await db.refresh(milestone)
    assert milestone.status == MilestoneStatus.IN_PROGRESS
    assert milestone.actual_start == date(2024, 3, 4)


async def test_get_by_date_and_update(db, owner, project):
    created = await progress_service.create_progress_update(db, project.id, report(date(2024, 3, 1)), owner)
    found = await progress_service.get_progress_update_by_date(db, project.id, date(2024, 3, 1))
    assert found.id == created.id
    with pytest.raises(NotFoundError):
        await progress_service.get_progress_update_by_date(db, project.id, date(2024, 3, 2))

    updated = await progress_service.update_progress_update(
        db, project.id, created.id, ProgressUpdateUpdate(issues="Cement shortage", workers_count=8)
    )
    assert updated.issues == "Cement shortage"
    assert updated.workers_count == 8
    assert updated.work_description == "Work"


async def test_list_newest_first_with_range(db, owner, project):
    for day in (1, 2, 3, 4):
        await progress_service.create_progress_update(db, project.id, report(date(2024, 3, day)), owner)

    items, total = await progress_service.list_progress_updates(db, project.id, page=1, limit=2)
    assert total == 4
    assert [u.date for u in items] == [date(2024, 3, 4), date(2024, 3, 3)]

    items, total = await progress_service.list_progress_updates(
        db, project.id, page=1, limit=10, start_date=date(2024, 3, 2), end_date=date(2024, 3, 3)
    )
    assert total == 2
    assert [u.date for u in items] == [date(2024, 3, 3), date(2024, 3, 2)]
