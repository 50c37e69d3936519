"""Project analytics API routes."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projecteye.auth.deps import get_project_member, get_today
from projecteye.auth.rbac import can_view_financials
from projecteye.database import get_db
from projecteye.models.project import ProjectMember
from projecteye.schemas.analytics import (
    BudgetBurnRate,
    Dashboard,
    MilestoneAnalytics,
    ProgressTrendPoint,
    TeamAnalytics,
    TimelineEntry,
)
from projecteye.services import analytics_service

router = APIRouter(prefix="/projects", tags=["analytics"])


@router.get("/{project_id}/dashboard", response_model=Dashboard)
async def get_dashboard(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    today: Annotated[date, Depends(get_today)],
):
    return await analytics_service.get_dashboard(db, project_id, today)


@router.get("/{project_id}/progress-trends", response_model=list[ProgressTrendPoint])
async def get_progress_trends(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    today: Annotated[date, Depends(get_today)],
    days: int = Query(analytics_service.DEFAULT_TREND_DAYS, ge=1, le=365),
):
    return await analytics_service.get_progress_trends(db, project_id, today, days)


@router.get("/{project_id}/budget-burn-rate", response_model=BudgetBurnRate)
async def get_budget_burn_rate(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    if not can_view_financials(member):
        raise HTTPException(status_code=403, detail="Cannot view financials")
    return await analytics_service.get_budget_burn_rate(db, project_id)


@router.get("/{project_id}/milestone-timeline", response_model=list[TimelineEntry])
async def get_milestone_timeline(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    today: Annotated[date, Depends(get_today)],
):
    return await analytics_service.get_milestone_timeline(db, project_id, today)


@router.get("/{project_id}/milestone-analytics", response_model=MilestoneAnalytics)
async def get_milestone_analytics(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    return await analytics_service.get_milestone_analytics(db, project_id)


@router.get("/{project_id}/team-analytics", response_model=TeamAnalytics)
async def get_team_analytics(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    today: Annotated[date, Depends(get_today)],
):
    return await analytics_service.get_team_analytics(db, project_id, today)
