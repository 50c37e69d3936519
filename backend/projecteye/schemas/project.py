"""Project and membership schemas."""
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from projecteye.models.project import ProjectStatus, ProjectType
from projecteye.schemas.common import Pagination


class Address(BaseModel):
    line1: str = Field(..., min_length=1, max_length=255)
    line2: str | None = None
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., min_length=1, max_length=10)
    landmark: str | None = None


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: ProjectType
    description: str | None = None
    address: Address
    start_date: date
    estimated_end_date: date
    total_budget: Decimal = Field(..., ge=0)


class ProjectUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    address: Address | None = None
    estimated_end_date: date | None = None
    total_budget: Decimal | None = Field(None, ge=0)
    status: ProjectStatus | None = None


class ProjectResponse(BaseModel):
    id: str
    name: str
    type: ProjectType
    description: str | None
    address: dict
    start_date: date
    estimated_end_date: date
    total_budget: Decimal
    status: ProjectStatus
    created_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectList(BaseModel):
    items: list[ProjectResponse]
    pagination: Pagination


class MemberPermissions(BaseModel):
    can_view_financials: bool = False
    can_approve_expenses: bool = False
    can_edit_project: bool = False
    can_add_members: bool = False
    can_upload_documents: bool = False
    can_create_milestones: bool = False


class MemberCreate(BaseModel):
    user_id: str
    role: str = Field(..., min_length=1, max_length=50)
    permissions: MemberPermissions = Field(default_factory=MemberPermissions)


class MemberUser(BaseModel):
    id: str
    email: str
    full_name: str

    class Config:
        from_attributes = True


class MemberResponse(BaseModel):
    id: str
    project_id: str
    user_id: str
    role: str
    permissions: dict[str, bool]
    joined_at: datetime
    user: MemberUser

    class Config:
        from_attributes = True


class ProjectStats(BaseModel):
    """Dashboard figures. Money totals count approved transactions only."""

    total_milestones: int
    completed_milestones: int
    average_milestone_progress: int
    progress_updates: int
    members: int
    total_budget: Decimal
    total_expenses: Decimal
    total_payments: Decimal
    budget_utilization: Decimal | None
    pending_approvals: int
    total_days: int
    elapsed_days: int
    time_progress_percentage: Decimal
