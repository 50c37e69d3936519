"""Pydantic schemas."""
from projecteye.schemas.analytics import (
    BudgetBurnRate,
    Dashboard,
    MilestoneAnalytics,
    ProgressTrendPoint,
    TeamAnalytics,
    TimelineEntry,
)
from projecteye.schemas.common import Pagination
from projecteye.schemas.milestone import (
    LinkProgressRequest,
    MilestoneCreate,
    MilestoneDetail,
    MilestoneProgress,
    MilestoneResponse,
    MilestoneUpdate,
    TemplateRequest,
    TemplateResult,
)
from projecteye.schemas.progress import (
    ProgressUpdateCreate,
    ProgressUpdateList,
    ProgressUpdateResponse,
    ProgressUpdateUpdate,
)
from projecteye.schemas.project import (
    MemberCreate,
    MemberResponse,
    ProjectCreate,
    ProjectList,
    ProjectResponse,
    ProjectStats,
    ProjectUpdate,
)
from projecteye.schemas.transaction import (
    ApprovalRequest,
    FinancialSummaryResponse,
    TransactionCreate,
    TransactionList,
    TransactionResponse,
    TransactionUpdate,
)

__all__ = [
    "ApprovalRequest",
    "BudgetBurnRate",
    "Dashboard",
    "FinancialSummaryResponse",
    "LinkProgressRequest",
    "MemberCreate",
    "MemberResponse",
    "MilestoneAnalytics",
    "MilestoneCreate",
    "MilestoneDetail",
    "MilestoneProgress",
    "MilestoneResponse",
    "MilestoneUpdate",
    "Pagination",
    "ProgressTrendPoint",
    "ProgressUpdateCreate",
    "ProgressUpdateList",
    "ProgressUpdateResponse",
    "ProgressUpdateUpdate",
    "ProjectCreate",
    "ProjectList",
    "ProjectResponse",
    "ProjectStats",
    "ProjectUpdate",
    "TeamAnalytics",
    "TemplateRequest",
    "TemplateResult",
    "TimelineEntry",
    "TransactionCreate",
    "TransactionList",
    "TransactionResponse",
    "TransactionUpdate",
]
