"""Project analytics schemas."""
import datetime
from decimal import Decimal

from pydantic import BaseModel

from projecteye.models.milestone import MilestoneStatus
from projecteye.models.project import ProjectStatus, ProjectType


class DashboardProject(BaseModel):
    name: str
    type: ProjectType
    status: ProjectStatus
    start_date: datetime.date
    estimated_end_date: datetime.date
    days_remaining: int
    is_delayed: bool


class MilestoneCounts(BaseModel):
    total: int
    completed: int
    in_progress: int
    pending: int
    delayed: int


class DashboardFinancials(BaseModel):
    budget: Decimal
    expenses: Decimal
    payments: Decimal
    advances: Decimal
    remaining: Decimal
    utilization: Decimal | None
    pending_approvals: int


class Dashboard(BaseModel):
    """Single-call overview for a project's home screen."""

    project: DashboardProject
    overall_progress: int
    milestones: MilestoneCounts
    progress_updates: int
    financials: DashboardFinancials
    team_members: int


class ProgressTrendPoint(BaseModel):
    date: datetime.date
    workers_count: int
    weather_conditions: str | None
    has_issues: bool


class BurnPoint(BaseModel):
    day: datetime.date
    cumulative_spent: Decimal
    budget_remaining: Decimal

    class Config:
        from_attributes = True


class BudgetBurnRate(BaseModel):
    total_budget: Decimal
    total_days: int
    daily_budget_target: Decimal
    points: list[BurnPoint]

    class Config:
        from_attributes = True


class TimelineEntry(BaseModel):
    id: str
    name: str
    status: MilestoneStatus
    planned_start: datetime.date
    planned_end: datetime.date
    actual_start: datetime.date | None
    actual_end: datetime.date | None
    progress_percentage: int
    is_delayed: bool
    delay_days: int


class CompletionTrend(BaseModel):
    month: str
    completed: int
    total: int
    completion_rate: int


class MilestoneAnalytics(BaseModel):
    average_progress: int
    on_time_completions: int
    late_completions: int
    completion_trend: list[CompletionTrend]


class MemberActivity(BaseModel):
    user_id: str
    full_name: str
    role: str
    progress_updates: int
    days_active: int


class RoleCount(BaseModel):
    role: str
    count: int


class TeamAnalytics(BaseModel):
    members: list[MemberActivity]
    role_distribution: list[RoleCount]
    total_updates: int
    average_per_member: int
