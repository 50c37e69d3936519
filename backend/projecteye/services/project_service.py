"""Project and membership service."""
import logging
from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from projecteye.auth.rbac import can_create_project
from projecteye.engine.financials import FinancialAggregator
from projecteye.engine.milestones import progress_snapshot, rollup_children
from projecteye.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from projecteye.models.milestone import Milestone, MilestoneStatus
from projecteye.models.progress import ProgressUpdate
from projecteye.models.project import OWNER_PERMISSIONS, Project, ProjectMember, ProjectStatus, ProjectType
from projecteye.models.transaction import Transaction
from projecteye.models.user import User
from projecteye.schemas.project import MemberCreate, ProjectCreate, ProjectStats, ProjectUpdate

logger = logging.getLogger(__name__)

OWNER_MEMBER_ROLE = "OWNER"


async def get_project(db: AsyncSession, project_id: str) -> Project:
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if not project:
        raise NotFoundError("Project not found")
    return project


async def create_project(db: AsyncSession, data: ProjectCreate, user: User) -> Project:
    """Create a project and make its creator an OWNER member with every permission."""
    if not can_create_project(user):
        raise PermissionDeniedError("Only owners can create projects")
    project = Project(
        name=data.name,
        type=data.type,
        description=data.description,
        address=data.address.model_dump(),
        start_date=data.start_date,
        estimated_end_date=data.estimated_end_date,
        total_budget=data.total_budget,
        status=ProjectStatus.PLANNING,
        created_by=user.id,
    )
    db.add(project)
    await db.flush()
    db.add(ProjectMember(
        project_id=project.id,
        user_id=user.id,
        role=OWNER_MEMBER_ROLE,
        permissions=dict(OWNER_PERMISSIONS),
    ))
    await db.flush()
    await db.refresh(project)
    logger.info("Created project %s (%s) for user %s", project.id, project.type.value, user.id)
    return project


async def update_project(db: AsyncSession, project_id: str, data: ProjectUpdate) -> Project:
    project = await get_project(db, project_id)
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(project, key, value)
    await db.flush()
    await db.refresh(project)
    return project


async def list_projects(
    db: AsyncSession,
    user: User,
    page: int,
    limit: int,
    status: ProjectStatus | None = None,
    project_type: ProjectType | None = None,
    search: str | None = None,
) -> tuple[list[Project], int]:
    """Projects the user is a member of, newest first. Returns (page items, total)."""
    query = (
        select(Project)
        .join(ProjectMember, ProjectMember.project_id == Project.id)
        .where(ProjectMember.user_id == user.id)
    )
    if status:
        query = query.where(Project.status == status)
    if project_type:
        query = query.where(Project.type == project_type)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Project.name.ilike(pattern), Project.description.ilike(pattern)))

    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(
        query.order_by(Project.created_at.desc()).offset((page - 1) * limit).limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def get_member(db: AsyncSession, project_id: str, user_id: str) -> ProjectMember | None:
    result = await db.execute(
        select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def list_members(db: AsyncSession, project_id: str) -> list[ProjectMember]:
    await get_project(db, project_id)
    result = await db.execute(
        select(ProjectMember)
        .where(ProjectMember.project_id == project_id)
        .options(selectinload(ProjectMember.user))
        .order_by(ProjectMember.joined_at)
    )
    return list(result.scalars().all())


async def add_member(db: AsyncSession, project_id: str, data: MemberCreate) -> ProjectMember:
    await get_project(db, project_id)
    user = await db.get(User, data.user_id)
    if not user:
        raise NotFoundError("User not found")
    if await get_member(db, project_id, data.user_id):
        raise ConflictError("User is already a member of this project")

    member = ProjectMember(
        project_id=project_id,
        user_id=data.user_id,
        role=data.role,
        permissions=data.permissions.model_dump(),
    )
    db.add(member)
    await db.flush()
    result = await db.execute(
        select(ProjectMember)
        .where(ProjectMember.id == member.id)
        .options(selectinload(ProjectMember.user))
    )
    logger.info("Added user %s to project %s as %s", data.user_id, project_id, data.role)
    return result.scalar_one()


async def remove_member(db: AsyncSession, project_id: str, user_id: str) -> None:
    member = await get_member(db, project_id, user_id)
    if not member:
        raise NotFoundError("Member not found")
    if member.role == OWNER_MEMBER_ROLE:
        raise ConflictError("Cannot remove project owner")
    await db.delete(member)
    await db.flush()
    logger.info("Removed user %s from project %s", user_id, project_id)


async def get_project_stats(db: AsyncSession, project_id: str, today: date) -> ProjectStats:
    project = await get_project(db, project_id)

    milestones = (
        await db.execute(select(Milestone).where(Milestone.project_id == project_id))
    ).scalars().all()
    transactions = (
        await db.execute(select(Transaction).where(Transaction.project_id == project_id))
    ).scalars().all()
    update_count = await db.scalar(
        select(func.count(ProgressUpdate.id)).where(ProgressUpdate.project_id == project_id)
    )
    member_count = await db.scalar(
        select(func.count(ProjectMember.id)).where(ProjectMember.project_id == project_id)
    )

    summary = FinancialAggregator().summarize(project.total_budget, transactions)
    average = rollup_children(milestones)
    schedule = progress_snapshot(
        planned_start=project.start_date,
        planned_end=project.estimated_end_date,
        status=MilestoneStatus.COMPLETED if project.status == ProjectStatus.COMPLETED else MilestoneStatus.IN_PROGRESS,
        progress_percentage=average.progress_percentage if average else 0,
        today=today,
    )

    return ProjectStats(
        total_milestones=len(milestones),
        completed_milestones=sum(1 for m in milestones if m.status == MilestoneStatus.COMPLETED),
        average_milestone_progress=schedule.progress_percentage,
        progress_updates=update_count or 0,
        members=member_count or 0,
        total_budget=project.total_budget,
        total_expenses=summary.total_expenses,
        total_payments=summary.total_payments,
        budget_utilization=summary.budget_utilization,
        pending_approvals=summary.pending_approvals,
        total_days=schedule.total_days,
        elapsed_days=schedule.elapsed_days,
        time_progress_percentage=schedule.time_progress_percentage,
    )
