"""Read-only project analytics: dashboard, trends, burn rate and timelines.

Nothing here writes. Every figure that depends on the calendar takes
``today`` from the caller.
"""
import logging
from collections import Counter, defaultdict
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from projecteye.engine.financials import FinancialAggregator
from projecteye.engine.milestones import ProgressSnapshot, progress_snapshot, rollup_children
from projecteye.models.milestone import Milestone, MilestoneStatus
from projecteye.models.progress import ProgressUpdate
from projecteye.models.project import ProjectMember, ProjectStatus
from projecteye.models.transaction import Transaction
from projecteye.schemas.analytics import (
    BudgetBurnRate,
    CompletionTrend,
    Dashboard,
    DashboardFinancials,
    DashboardProject,
    MemberActivity,
    MilestoneAnalytics,
    MilestoneCounts,
    ProgressTrendPoint,
    RoleCount,
    TeamAnalytics,
    TimelineEntry,
)
from projecteye.services.project_service import get_project

logger = logging.getLogger(__name__)

aggregator = FinancialAggregator()

DEFAULT_TREND_DAYS = 30

# Words in a site report's issues text that flag it on the trend chart
ISSUE_KEYWORDS = ("issue", "delay")


def _percent(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    return int((Decimal(part) * 100 / Decimal(whole)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _snapshot(milestone: Milestone, today: date) -> ProgressSnapshot:
    return progress_snapshot(
        planned_start=milestone.planned_start,
        planned_end=milestone.planned_end,
        status=milestone.status,
        progress_percentage=milestone.progress_percentage,
        today=today,
    )


async def _milestones(db: AsyncSession, project_id: str, *order_by) -> list[Milestone]:
    result = await db.execute(
        select(Milestone).where(Milestone.project_id == project_id).order_by(*order_by)
    )
    return list(result.scalars().all())


async def get_dashboard(db: AsyncSession, project_id: str, today: date) -> Dashboard:
    project = await get_project(db, project_id)
    milestones = await _milestones(db, project_id, Milestone.order)
    transactions = (
        await db.execute(select(Transaction).where(Transaction.project_id == project_id))
    ).scalars().all()
    update_count = await db.scalar(
        select(func.count(ProgressUpdate.id)).where(ProgressUpdate.project_id == project_id)
    )
    member_count = await db.scalar(
        select(func.count(ProjectMember.id)).where(ProjectMember.project_id == project_id)
    )

    logger.debug("Building dashboard for project %s as of %s", project_id, today)
    statuses = Counter(m.status for m in milestones)
    summary = aggregator.summarize(project.total_budget, transactions)
    schedule = progress_snapshot(
        planned_start=project.start_date,
        planned_end=project.estimated_end_date,
        status=MilestoneStatus.COMPLETED if project.status == ProjectStatus.COMPLETED else MilestoneStatus.IN_PROGRESS,
        progress_percentage=0,
        today=today,
    )

    return Dashboard(
        project=DashboardProject(
            name=project.name,
            type=project.type,
            status=project.status,
            start_date=project.start_date,
            estimated_end_date=project.estimated_end_date,
            days_remaining=max(0, (project.estimated_end_date - today).days),
            is_delayed=schedule.is_delayed,
        ),
        overall_progress=_percent(statuses[MilestoneStatus.COMPLETED], len(milestones)),
        milestones=MilestoneCounts(
            total=len(milestones),
            completed=statuses[MilestoneStatus.COMPLETED],
            in_progress=statuses[MilestoneStatus.IN_PROGRESS],
            pending=statuses[MilestoneStatus.PENDING],
            delayed=sum(1 for m in milestones if _snapshot(m, today).is_delayed),
        ),
        progress_updates=update_count or 0,
        financials=DashboardFinancials(
            budget=summary.total_budget,
            expenses=summary.total_expenses,
            payments=summary.total_payments,
            advances=summary.total_advances,
            remaining=summary.remaining_budget,
            utilization=summary.budget_utilization,
            pending_approvals=summary.pending_approvals,
        ),
        team_members=member_count or 0,
    )


async def get_progress_trends(
    db: AsyncSession,
    project_id: str,
    today: date,
    days: int = DEFAULT_TREND_DAYS,
) -> list[ProgressTrendPoint]:
    """Site reports from the last ``days`` days up to today, oldest first."""
    await get_project(db, project_id)
    result = await db.execute(
        select(ProgressUpdate)
        .where(
            ProgressUpdate.project_id == project_id,
            ProgressUpdate.date >= today - timedelta(days=days),
            ProgressUpdate.date <= today,
        )
        .order_by(ProgressUpdate.date)
    )
    points = []
    for update in result.scalars().all():
        issues = (update.issues or "").lower()
        points.append(ProgressTrendPoint(
            date=update.date,
            workers_count=update.workers_count or 0,
            weather_conditions=update.weather_conditions,
            has_issues=any(word in issues for word in ISSUE_KEYWORDS),
        ))
    return points


async def get_budget_burn_rate(db: AsyncSession, project_id: str) -> BudgetBurnRate:
    project = await get_project(db, project_id)
    transactions = (
        await db.execute(select(Transaction).where(Transaction.project_id == project_id))
    ).scalars().all()
    burn = aggregator.burn_rate(
        project.total_budget, transactions, project.start_date, project.estimated_end_date
    )
    return BudgetBurnRate.model_validate(burn)


async def get_milestone_timeline(db: AsyncSession, project_id: str, today: date) -> list[TimelineEntry]:
    await get_project(db, project_id)
    entries = []
    for milestone in await _milestones(db, project_id, Milestone.planned_start, Milestone.order):
        snapshot = _snapshot(milestone, today)
        entries.append(TimelineEntry(
            id=milestone.id,
            name=milestone.name,
            status=milestone.status,
            planned_start=milestone.planned_start,
            planned_end=milestone.planned_end,
            actual_start=milestone.actual_start,
            actual_end=milestone.actual_end,
            progress_percentage=milestone.progress_percentage,
            is_delayed=snapshot.is_delayed,
            delay_days=snapshot.delay_days,
        ))
    return entries


async def get_milestone_analytics(db: AsyncSession, project_id: str) -> MilestoneAnalytics:
    """Completion punctuality and a per-month completion rate keyed on planned end."""
    await get_project(db, project_id)
    milestones = await _milestones(db, project_id, Milestone.order)

    finished = [m for m in milestones if m.status == MilestoneStatus.COMPLETED and m.actual_end]
    by_month: dict[str, list[Milestone]] = defaultdict(list)
    for milestone in milestones:
        by_month[milestone.planned_end.strftime("%Y-%m")].append(milestone)

    trend = []
    for month in sorted(by_month):
        group = by_month[month]
        completed = sum(1 for m in group if m.status == MilestoneStatus.COMPLETED)
        trend.append(CompletionTrend(
            month=month,
            completed=completed,
            total=len(group),
            completion_rate=_percent(completed, len(group)),
        ))

    average = rollup_children(milestones)
    return MilestoneAnalytics(
        average_progress=average.progress_percentage if average else 0,
        on_time_completions=sum(1 for m in finished if m.actual_end <= m.planned_end),
        late_completions=sum(1 for m in finished if m.actual_end > m.planned_end),
        completion_trend=trend,
    )


async def get_team_analytics(db: AsyncSession, project_id: str, today: date) -> TeamAnalytics:
    await get_project(db, project_id)
    members = (
        await db.execute(
            select(ProjectMember)
            .where(ProjectMember.project_id == project_id)
            .options(selectinload(ProjectMember.user))
            .order_by(ProjectMember.joined_at)
        )
    ).scalars().all()
    rows = await db.execute(
        select(ProgressUpdate.reported_by, func.count(ProgressUpdate.id))
        .where(ProgressUpdate.project_id == project_id)
        .group_by(ProgressUpdate.reported_by)
    )
    updates_by_user = {user_id: count for user_id, count in rows.all()}
    total_updates = sum(updates_by_user.values())

    roles = Counter(m.role for m in members)
    return TeamAnalytics(
        members=[
            MemberActivity(
                user_id=m.user_id,
                full_name=m.user.full_name,
                role=m.role,
                progress_updates=updates_by_user.get(m.user_id, 0),
                days_active=max(0, (today - m.joined_at.date()).days),
            )
            for m in members
        ],
        role_distribution=[RoleCount(role=role, count=count) for role, count in roles.items()],
        total_updates=total_updates,
        average_per_member=int(
            (Decimal(total_updates) / Decimal(max(len(members), 1))).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        ),
    )
