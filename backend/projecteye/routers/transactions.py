"""Financial transaction API routes."""
from datetime import date
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projecteye.auth.deps import get_current_user, get_project_member
from projecteye.auth.rbac import can_approve_expenses, can_view_financials
from projecteye.config import get_settings
from projecteye.database import get_db
from projecteye.models.project import ProjectMember
from projecteye.models.transaction import ApprovalStatus, TransactionType
from projecteye.models.user import User
from projecteye.schemas.common import Pagination
from projecteye.schemas.transaction import (
    ApprovalRequest,
    FinancialSummaryResponse,
    TransactionCreate,
    TransactionList,
    TransactionResponse,
    TransactionUpdate,
)
from projecteye.services import financial_service

settings = get_settings()

router = APIRouter(prefix="/projects", tags=["transactions"])


def _require_financials(member: ProjectMember) -> None:
    if not can_view_financials(member):
        raise HTTPException(status_code=403, detail="Cannot view financials")


@router.post("/{project_id}/transactions", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    project_id: str,
    data: TransactionCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    txn = await financial_service.create_transaction(db, project_id, data, user)
    return TransactionResponse.model_validate(txn)


@router.get("/{project_id}/transactions", response_model=TransactionList)
async def list_transactions(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    type: TransactionType | None = None,
    approval_status: ApprovalStatus | None = None,
    category: str | None = None,
    min_amount: Decimal | None = Query(None, ge=0),
    max_amount: Decimal | None = Query(None, ge=0),
    start_date: date | None = None,
    end_date: date | None = None,
):
    _require_financials(member)
    transactions, total = await financial_service.list_transactions(
        db,
        project_id,
        page,
        limit,
        txn_type=type,
        approval_status=approval_status,
        category=category,
        min_amount=min_amount,
        max_amount=max_amount,
        start_date=start_date,
        end_date=end_date,
    )
    return TransactionList(
        items=[TransactionResponse.model_validate(t) for t in transactions],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{project_id}/transactions/summary", response_model=FinancialSummaryResponse)
async def get_financial_summary(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    _require_financials(member)
    summary = await financial_service.get_financial_summary(db, project_id)
    return FinancialSummaryResponse.model_validate(summary)


@router.get("/{project_id}/transactions/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    project_id: str,
    transaction_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    _require_financials(member)
    txn = await financial_service.get_transaction(db, project_id, transaction_id)
    return TransactionResponse.model_validate(txn)


@router.patch("/{project_id}/transactions/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    project_id: str,
    transaction_id: str,
    data: TransactionUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    txn = await financial_service.update_transaction(db, project_id, transaction_id, data)
    return TransactionResponse.model_validate(txn)


@router.delete("/{project_id}/transactions/{transaction_id}", status_code=204)
async def delete_transaction(
    project_id: str,
    transaction_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    await financial_service.delete_transaction(db, project_id, transaction_id)


@router.post("/{project_id}/transactions/{transaction_id}/approve", response_model=TransactionResponse)
async def approve_transaction(
    project_id: str,
    transaction_id: str,
    data: ApprovalRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    member: Annotated[ProjectMember, Depends(get_project_member)],
):
    if not can_approve_expenses(member):
        raise HTTPException(status_code=403, detail="Cannot approve transactions")
    txn = await financial_service.approve_transaction(db, project_id, transaction_id, data, user)
    return TransactionResponse.model_validate(txn)
