"""Progress update schemas."""
import datetime
from typing import Literal

from pydantic import BaseModel, Field

from projecteye.schemas.common import Pagination

Weather = Literal["sunny", "cloudy", "rainy", "stormy", "foggy"]


class ProgressUpdateCreate(BaseModel):
    date: datetime.date
    work_description: str = Field(..., min_length=1)
    workers_count: int | None = Field(None, ge=0)
    weather_conditions: Weather | None = None
    issues: str | None = None
    milestone_id: str | None = None


class ProgressUpdateUpdate(BaseModel):
    work_description: str | None = Field(None, min_length=1)
    workers_count: int | None = Field(None, ge=0)
    weather_conditions: Weather | None = None
    issues: str | None = None


class ProgressUpdateResponse(BaseModel):
    id: str
    project_id: str
    reported_by: str
    date: datetime.date
    work_description: str
    workers_count: int | None
    weather_conditions: str | None
    issues: str | None
    milestone_id: str | None
    created_at: datetime.datetime

    class Config:
        from_attributes = True


class ProgressUpdateList(BaseModel):
    items: list[ProgressUpdateResponse]
    pagination: Pagination
