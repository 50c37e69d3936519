"""Daily progress update API routes."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projecteye.auth.deps import get_current_user, get_project_member
from projecteye.auth.rbac import can_upload_documents
from projecteye.config import get_settings
from projecteye.database import get_db
from projecteye.models.project import ProjectMember
from projecteye.models.user import User
from projecteye.schemas.common import Pagination
from projecteye.schemas.progress import (
    ProgressUpdateCreate,
    ProgressUpdateList,
    ProgressUpdateResponse,
    ProgressUpdateUpdate,
)
from projecteye.services import progress_service

settings = get_settings()

router = APIRouter(prefix="/projects", tags=["progress"])


@router.post("/{project_id}/progress", response_model=ProgressUpdateResponse, status_code=201)
async def create_progress_update(
    project_id: str,
    data: ProgressUpdateCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    if not can_upload_documents(member):
        raise HTTPException(status_code=403, detail="Cannot post progress updates")
    progress_update = await progress_service.create_progress_update(db, project_id, data, user)
    return ProgressUpdateResponse.model_validate(progress_update)


@router.get("/{project_id}/progress", response_model=ProgressUpdateList)
async def list_progress_updates(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    start_date: date | None = None,
    end_date: date | None = None,
):
    updates, total = await progress_service.list_progress_updates(
        db, project_id, page, limit, start_date=start_date, end_date=end_date
    )
    return ProgressUpdateList(
        items=[ProgressUpdateResponse.model_validate(u) for u in updates],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{project_id}/progress/date/{on}", response_model=ProgressUpdateResponse)
async def get_progress_update_by_date(
    project_id: str,
    on: date,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    progress_update = await progress_service.get_progress_update_by_date(db, project_id, on)
    return ProgressUpdateResponse.model_validate(progress_update)


@router.get("/{project_id}/progress/{update_id}", response_model=ProgressUpdateResponse)
async def get_progress_update(
    project_id: str,
    update_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    progress_update = await progress_service.get_progress_update(db, project_id, update_id)
    return ProgressUpdateResponse.model_validate(progress_update)


@router.patch("/{project_id}/progress/{update_id}", response_model=ProgressUpdateResponse)
async def update_progress_update(
    project_id: str,
    update_id: str,
    data: ProgressUpdateUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    if not can_upload_documents(member):
        raise HTTPException(status_code=403, detail="Cannot edit progress updates")
    progress_update = await progress_service.update_progress_update(db, project_id, update_id, data)
    return ProgressUpdateResponse.model_validate(progress_update)
