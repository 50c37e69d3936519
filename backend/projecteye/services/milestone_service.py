"""Milestone service: ordering, status updates, rollup and templates."""
import logging
from datetime import date

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from projecteye.engine.milestones import (
    ProgressSnapshot,
    check_planned_window,
    derive_status,
    progress_snapshot,
    rollup_children,
)
from projecteye.engine.templates import expand_template
from projecteye.exceptions import ConflictError, NotFoundError
from projecteye.models.milestone import Milestone, MilestoneStatus
from projecteye.models.progress import ProgressUpdate
from projecteye.models.project import ProjectType
from projecteye.schemas.milestone import MilestoneCreate, MilestoneUpdate
from projecteye.services.project_service import get_project

logger = logging.getLogger(__name__)

RECENT_UPDATES_LIMIT = 5

# Columns that an update may not clear
_REQUIRED_FIELDS = {"name", "planned_start", "planned_end", "progress_percentage"}


def _sibling_scope(project_id: str, parent_id: str | None) -> tuple:
    if parent_id is None:
        return Milestone.project_id == project_id, Milestone.parent_id.is_(None)
    return Milestone.project_id == project_id, Milestone.parent_id == parent_id


async def _get_milestone(db: AsyncSession, project_id: str, milestone_id: str) -> Milestone:
    result = await db.execute(
        select(Milestone).where(Milestone.id == milestone_id, Milestone.project_id == project_id)
    )
    milestone = result.scalar_one_or_none()
    if not milestone:
        raise NotFoundError("Milestone not found")
    return milestone


async def _children(db: AsyncSession, parent_id: str) -> list[Milestone]:
    result = await db.execute(
        select(Milestone).where(Milestone.parent_id == parent_id).order_by(Milestone.order)
    )
    return list(result.scalars().all())


def start_if_pending(milestone: Milestone, started_on: date) -> None:
    """A PENDING milestone with linked site work becomes IN_PROGRESS from that day."""
    if milestone.status == MilestoneStatus.PENDING:
        milestone.status = MilestoneStatus.IN_PROGRESS
        milestone.actual_start = started_on


async def create_milestone(db: AsyncSession, project_id: str, data: MilestoneCreate) -> Milestone:
    """Insert at data.order, shifting siblings at or after that position up by one."""
    await get_project(db, project_id)
    check_planned_window(data.planned_start, data.planned_end)

    if data.parent_id:
        result = await db.execute(
            select(Milestone).where(Milestone.id == data.parent_id, Milestone.project_id == project_id)
        )
        parent = result.scalar_one_or_none()
        if not parent:
            raise NotFoundError("Parent milestone not found")
        if parent.parent_id is not None:
            raise ConflictError("Milestones can only be nested one level deep")

    await db.execute(
        update(Milestone)
        .where(*_sibling_scope(project_id, data.parent_id), Milestone.order >= data.order)
        .values({Milestone.order: Milestone.order + 1})
    )

    milestone = Milestone(
        project_id=project_id,
        parent_id=data.parent_id,
        name=data.name,
        description=data.description,
        order=data.order,
        planned_start=data.planned_start,
        planned_end=data.planned_end,
        progress_percentage=0,
        status=MilestoneStatus.PENDING,
    )
    db.add(milestone)
    await db.flush()
    await db.refresh(milestone)
    logger.info("Created milestone %s at order %d in project %s", milestone.id, milestone.order, project_id)
    return milestone


async def update_milestone(
    db: AsyncSession,
    project_id: str,
    milestone_id: str,
    data: MilestoneUpdate,
    today: date,
) -> Milestone:
    milestone = await _get_milestone(db, project_id, milestone_id)
    fields = data.model_dump(exclude_unset=True)

    planned_start = data.planned_start or milestone.planned_start
    planned_end = data.planned_end or milestone.planned_end
    if data.planned_start or data.planned_end:
        check_planned_window(planned_start, planned_end)

    status = derive_status(
        prior_status=milestone.status,
        today=today,
        planned_end=planned_end,
        actual_start=data.actual_start,
        actual_end=data.actual_end,
        progress_percentage=data.progress_percentage,
        explicit_status=data.status,
    )

    for key, value in fields.items():
        if key == "status" or (value is None and key in _REQUIRED_FIELDS):
            continue
        setattr(milestone, key, value)
    milestone.status = status
    await db.flush()

    if status == MilestoneStatus.COMPLETED and milestone.parent_id:
        await _rollup_parent(db, milestone.parent_id)

    await db.refresh(milestone)
    return milestone


async def _rollup_parent(db: AsyncSession, parent_id: str) -> None:
    parent = await db.get(Milestone, parent_id)
    if not parent:
        return
    rollup = rollup_children(await _children(db, parent_id))
    if rollup is None:
        return
    parent.progress_percentage = rollup.progress_percentage
    parent.status = rollup.status
    await db.flush()
    logger.debug("Rolled up milestone %s to %d%% %s", parent_id, rollup.progress_percentage, rollup.status.value)


async def get_milestone(
    db: AsyncSession,
    project_id: str,
    milestone_id: str,
) -> tuple[Milestone, list[Milestone], list[ProgressUpdate]]:
    """Milestone with its sub-milestones and most recent linked progress updates."""
    milestone = await _get_milestone(db, project_id, milestone_id)
    children = await _children(db, milestone.id)
    result = await db.execute(
        select(ProgressUpdate)
        .where(ProgressUpdate.milestone_id == milestone.id)
        .order_by(ProgressUpdate.date.desc())
        .limit(RECENT_UPDATES_LIMIT)
    )
    return milestone, children, list(result.scalars().all())


async def list_milestones(
    db: AsyncSession,
    project_id: str,
    status: MilestoneStatus | None = None,
    parent_id: str | None = None,
    top_level_only: bool = False,
    planned_from: date | None = None,
    planned_to: date | None = None,
) -> list[Milestone]:
    await get_project(db, project_id)
    query = select(Milestone).where(Milestone.project_id == project_id)
    if status:
        query = query.where(Milestone.status == status)
    if top_level_only:
        query = query.where(Milestone.parent_id.is_(None))
    elif parent_id:
        query = query.where(Milestone.parent_id == parent_id)
    if planned_from:
        query = query.where(Milestone.planned_start >= planned_from)
    if planned_to:
        query = query.where(Milestone.planned_start <= planned_to)
    result = await db.execute(query.order_by(Milestone.order, Milestone.created_at))
    return list(result.scalars().all())


async def get_milestone_progress(
    db: AsyncSession,
    project_id: str,
    milestone_id: str,
    today: date,
) -> tuple[Milestone, ProgressSnapshot]:
    milestone = await _get_milestone(db, project_id, milestone_id)
    snapshot = progress_snapshot(
        planned_start=milestone.planned_start,
        planned_end=milestone.planned_end,
        status=milestone.status,
        progress_percentage=milestone.progress_percentage,
        today=today,
    )
    return milestone, snapshot


async def delete_milestone(db: AsyncSession, project_id: str, milestone_id: str) -> None:
    """Delete a milestone and its children, then close the gap in sibling order."""
    milestone = await _get_milestone(db, project_id, milestone_id)
    children = await _children(db, milestone.id)

    linked = await db.scalar(
        select(func.count(ProgressUpdate.id)).where(ProgressUpdate.milestone_id == milestone.id)
    )
    if linked:
        raise ConflictError("Cannot delete milestone with linked progress updates")

    parent_id, position = milestone.parent_id, milestone.order
    if children:
        # Updates on removed children stay, unlinked
        await db.execute(
            update(ProgressUpdate)
            .where(ProgressUpdate.milestone_id.in_([c.id for c in children]))
            .values(milestone_id=None)
        )
    for child in children:
        await db.delete(child)
    await db.flush()
    await db.delete(milestone)
    await db.flush()

    await db.execute(
        update(Milestone)
        .where(*_sibling_scope(project_id, parent_id), Milestone.order > position)
        .values({Milestone.order: Milestone.order - 1})
    )
    logger.info("Deleted milestone %s (%d children) from project %s", milestone_id, len(children), project_id)


async def create_milestones_from_template(
    db: AsyncSession,
    project_id: str,
    project_type: ProjectType | None = None,
) -> list[Milestone]:
    project = await get_project(db, project_id)
    phases = expand_template(project_type or project.type, project.start_date)
    milestones = []
    for phase in phases:
        milestones.append(await create_milestone(db, project_id, MilestoneCreate(
            name=phase.name,
            order=phase.order,
            planned_start=phase.planned_start,
            planned_end=phase.planned_end,
        )))
    logger.info("Created %d template milestones for project %s", len(milestones), project_id)
    return milestones


async def link_progress_update(
    db: AsyncSession,
    project_id: str,
    milestone_id: str,
    progress_update_id: str,
) -> Milestone:
    milestone = await _get_milestone(db, project_id, milestone_id)
    result = await db.execute(
        select(ProgressUpdate).where(
            ProgressUpdate.id == progress_update_id,
            ProgressUpdate.project_id == project_id,
        )
    )
    progress_update = result.scalar_one_or_none()
    if not progress_update:
        raise NotFoundError("Progress update not found")

    progress_update.milestone_id = milestone.id
    start_if_pending(milestone, progress_update.date)
    await db.flush()
    await db.refresh(milestone)
    return milestone
