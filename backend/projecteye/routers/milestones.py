"""Milestone API routes."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from projecteye.auth.deps import get_project_member, get_today
from projecteye.auth.rbac import can_create_milestones
from projecteye.database import get_db
from projecteye.models.milestone import MilestoneStatus
from projecteye.models.project import ProjectMember
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
from projecteye.schemas.progress import ProgressUpdateResponse
from projecteye.services import milestone_service

router = APIRouter(prefix="/projects", tags=["milestones"])


def _require_create(member: ProjectMember) -> None:
    if not can_create_milestones(member):
        raise HTTPException(status_code=403, detail="Cannot manage milestones")


@router.post("/{project_id}/milestones", response_model=MilestoneResponse, status_code=201)
async def create_milestone(
    project_id: str,
    data: MilestoneCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    _require_create(member)
    milestone = await milestone_service.create_milestone(db, project_id, data)
    return MilestoneResponse.model_validate(milestone)


@router.post("/{project_id}/milestones/template", response_model=TemplateResult, status_code=201)
async def create_from_template(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    data: TemplateRequest | None = None,
):
    _require_create(member)
    milestones = await milestone_service.create_milestones_from_template(
        db, project_id, data.project_type if data else None
    )
    return TemplateResult(
        milestones=[MilestoneResponse.model_validate(m) for m in milestones],
        count=len(milestones),
    )


@router.get("/{project_id}/milestones", response_model=list[MilestoneResponse])
async def list_milestones(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    status: MilestoneStatus | None = None,
    parent_id: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
):
    """List milestones by order. ``parent_id=null`` returns top-level milestones only."""
    milestones = await milestone_service.list_milestones(
        db,
        project_id,
        status=status,
        parent_id=parent_id,
        top_level_only=parent_id == "null",
        planned_from=start_date,
        planned_to=end_date,
    )
    return [MilestoneResponse.model_validate(m) for m in milestones]


@router.get("/{project_id}/milestones/{milestone_id}", response_model=MilestoneDetail)
async def get_milestone(
    project_id: str,
    milestone_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    milestone, children, updates = await milestone_service.get_milestone(db, project_id, milestone_id)
    return MilestoneDetail(
        **MilestoneResponse.model_validate(milestone).model_dump(),
        sub_milestones=[MilestoneResponse.model_validate(c) for c in children],
        recent_progress_updates=[ProgressUpdateResponse.model_validate(u) for u in updates],
    )


@router.patch("/{project_id}/milestones/{milestone_id}", response_model=MilestoneResponse)
async def update_milestone(
    project_id: str,
    milestone_id: str,
    data: MilestoneUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    today: Annotated[date, Depends(get_today)],
):
    _require_create(member)
    milestone = await milestone_service.update_milestone(db, project_id, milestone_id, data, today)
    return MilestoneResponse.model_validate(milestone)


@router.delete("/{project_id}/milestones/{milestone_id}", status_code=204)
async def delete_milestone(
    project_id: str,
    milestone_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    _require_create(member)
    await milestone_service.delete_milestone(db, project_id, milestone_id)


@router.get("/{project_id}/milestones/{milestone_id}/progress", response_model=MilestoneProgress)
async def get_milestone_progress(
    project_id: str,
    milestone_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    today: Annotated[date, Depends(get_today)],
):
    milestone, snapshot = await milestone_service.get_milestone_progress(db, project_id, milestone_id, today)
    return MilestoneProgress(
        milestone_id=milestone.id,
        name=milestone.name,
        status=milestone.status,
        progress_percentage=milestone.progress_percentage,
        planned_start=milestone.planned_start,
        planned_end=milestone.planned_end,
        actual_start=milestone.actual_start,
        actual_end=milestone.actual_end,
        total_days=snapshot.total_days,
        elapsed_days=snapshot.elapsed_days,
        remaining_days=snapshot.remaining_days,
        time_progress_percentage=snapshot.time_progress_percentage,
        is_delayed=snapshot.is_delayed,
        delay_days=snapshot.delay_days,
    )


@router.post("/{project_id}/milestones/{milestone_id}/link-progress", response_model=MilestoneResponse)
async def link_progress_update(
    project_id: str,
    milestone_id: str,
    data: LinkProgressRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    _require_create(member)
    milestone = await milestone_service.link_progress_update(
        db, project_id, milestone_id, data.progress_update_id
    )
    return MilestoneResponse.model_validate(milestone)
