"""Milestone schemas."""
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from projecteye.models.milestone import MilestoneStatus
from projecteye.models.project import ProjectType
from projecteye.schemas.progress import ProgressUpdateResponse


class MilestoneCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    parent_id: str | None = None
    order: int = Field(..., ge=1)
    planned_start: date
    planned_end: date


class MilestoneUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    planned_start: date | None = None
    planned_end: date | None = None
    actual_start: date | None = None
    actual_end: date | None = None
    progress_percentage: int | None = Field(None, ge=0, le=100)
    status: MilestoneStatus | None = None


class MilestoneResponse(BaseModel):
    id: str
    project_id: str
    parent_id: str | None
    name: str
    description: str | None
    order: int
    planned_start: date
    planned_end: date
    actual_start: date | None
    actual_end: date | None
    progress_percentage: int
    status: MilestoneStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MilestoneDetail(MilestoneResponse):
    sub_milestones: list[MilestoneResponse] = []
    recent_progress_updates: list[ProgressUpdateResponse] = []


class MilestoneProgress(BaseModel):
    milestone_id: str
    name: str
    status: MilestoneStatus
    progress_percentage: int
    planned_start: date
    planned_end: date
    actual_start: date | None
    actual_end: date | None
    total_days: int
    elapsed_days: int
    remaining_days: int
    time_progress_percentage: Decimal
    is_delayed: bool
    delay_days: int


class TemplateRequest(BaseModel):
    # Defaults to the project's own type
    project_type: ProjectType | None = None


class TemplateResult(BaseModel):
    milestones: list[MilestoneResponse]
    count: int


class LinkProgressRequest(BaseModel):
    progress_update_id: str
