"""Project and membership API routes."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projecteye.auth.deps import get_current_user, get_project_member, get_today
from projecteye.auth.rbac import can_add_members, can_edit_project
from projecteye.config import get_settings
from projecteye.database import get_db
from projecteye.models.project import ProjectMember, ProjectStatus, ProjectType
from projecteye.models.user import User
from projecteye.schemas.common import Pagination
from projecteye.schemas.project import (
    MemberCreate,
    MemberResponse,
    ProjectCreate,
    ProjectList,
    ProjectResponse,
    ProjectStats,
    ProjectUpdate,
)
from projecteye.services import project_service

settings = get_settings()

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: ProjectCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    project = await project_service.create_project(db, data, user)
    return ProjectResponse.model_validate(project)


@router.get("", response_model=ProjectList)
async def list_projects(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status: ProjectStatus | None = None,
    type: ProjectType | None = None,
    search: str | None = None,
):
    projects, total = await project_service.list_projects(
        db, user, page, limit, status=status, project_type=type, search=search
    )
    return ProjectList(
        items=[ProjectResponse.model_validate(p) for p in projects],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    project = await project_service.get_project(db, project_id)
    return ProjectResponse.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    if not can_edit_project(member):
        raise HTTPException(status_code=403, detail="Cannot edit project")
    project = await project_service.update_project(db, project_id, data)
    return ProjectResponse.model_validate(project)


@router.get("/{project_id}/stats", response_model=ProjectStats)
async def get_project_stats(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    today: Annotated[date, Depends(get_today)],
):
    return await project_service.get_project_stats(db, project_id, today)


@router.get("/{project_id}/members", response_model=list[MemberResponse])
async def list_members(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    members = await project_service.list_members(db, project_id)
    return [MemberResponse.model_validate(m) for m in members]


@router.post("/{project_id}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    project_id: str,
    data: MemberCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    if not can_add_members(member):
        raise HTTPException(status_code=403, detail="Cannot add members")
    new_member = await project_service.add_member(db, project_id, data)
    return MemberResponse.model_validate(new_member)


@router.delete("/{project_id}/members/{user_id}", status_code=204)
async def remove_member(
    project_id: str,
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    if not can_add_members(member):
        raise HTTPException(status_code=403, detail="Cannot remove members")
    await project_service.remove_member(db, project_id, user_id)
