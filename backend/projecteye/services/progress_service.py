"""Daily progress update service."""
import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from projecteye.exceptions import ConflictError, NotFoundError
from projecteye.models.milestone import Milestone
from projecteye.models.progress import ProgressUpdate
from projecteye.models.user import User
from projecteye.schemas.progress import ProgressUpdateCreate, ProgressUpdateUpdate
from projecteye.services.milestone_service import start_if_pending
from projecteye.services.project_service import get_project

logger = logging.getLogger(__name__)


async def _update_for_date(db: AsyncSession, project_id: str, on: date) -> ProgressUpdate | None:
    result = await db.execute(
        select(ProgressUpdate).where(ProgressUpdate.project_id == project_id, ProgressUpdate.date == on)
    )
    return result.scalar_one_or_none()


async def create_progress_update(
    db: AsyncSession,
    project_id: str,
    data: ProgressUpdateCreate,
    reporter: User,
) -> ProgressUpdate:
    """Record the site report for one day. A linked PENDING milestone is started."""
    await get_project(db, project_id)
    if await _update_for_date(db, project_id, data.date):
        raise ConflictError("Progress update already exists for this date")

    milestone = None
    if data.milestone_id:
        result = await db.execute(
            select(Milestone).where(Milestone.id == data.milestone_id, Milestone.project_id == project_id)
        )
        milestone = result.scalar_one_or_none()
        if not milestone:
            raise NotFoundError("Milestone not found")

    progress_update = ProgressUpdate(
        project_id=project_id,
        reported_by=reporter.id,
        date=data.date,
        work_description=data.work_description,
        workers_count=data.workers_count,
        weather_conditions=data.weather_conditions,
        issues=data.issues,
        milestone_id=data.milestone_id,
    )
    db.add(progress_update)
    if milestone:
        start_if_pending(milestone, data.date)
    await db.flush()
    await db.refresh(progress_update)
    logger.info("Progress update %s recorded for project %s on %s", progress_update.id, project_id, data.date)
    return progress_update


async def get_progress_update(db: AsyncSession, project_id: str, update_id: str) -> ProgressUpdate:
    result = await db.execute(
        select(ProgressUpdate).where(ProgressUpdate.id == update_id, ProgressUpdate.project_id == project_id)
    )
    progress_update = result.scalar_one_or_none()
    if not progress_update:
        raise NotFoundError("Progress update not found")
    return progress_update


async def get_progress_update_by_date(db: AsyncSession, project_id: str, on: date) -> ProgressUpdate:
    progress_update = await _update_for_date(db, project_id, on)
    if not progress_update:
        raise NotFoundError("No progress update for this date")
    return progress_update


async def update_progress_update(
    db: AsyncSession,
    project_id: str,
    update_id: str,
    data: ProgressUpdateUpdate,
) -> ProgressUpdate:
    progress_update = await get_progress_update(db, project_id, update_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        if key == "work_description" and value is None:
            continue
        setattr(progress_update, key, value)
    await db.flush()
    await db.refresh(progress_update)
    return progress_update


async def list_progress_updates(
    db: AsyncSession,
    project_id: str,
    page: int,
    limit: int,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[list[ProgressUpdate], int]:
    """Updates newest first. Returns (page items, total)."""
    await get_project(db, project_id)
    query = select(ProgressUpdate).where(ProgressUpdate.project_id == project_id)
    if start_date:
        query = query.where(ProgressUpdate.date >= start_date)
    if end_date:
        query = query.where(ProgressUpdate.date <= end_date)

    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(
        query.order_by(ProgressUpdate.date.desc()).offset((page - 1) * limit).limit(limit)
    )
    return list(result.scalars().all()), total or 0
