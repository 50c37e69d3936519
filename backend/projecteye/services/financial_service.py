"""Financial transaction service and approval workflow."""
import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from projecteye.engine.financials import FinancialAggregator, FinancialSummary
from projecteye.exceptions import ConflictError, NotFoundError
from projecteye.models.transaction import ApprovalStatus, Transaction, TransactionType
from projecteye.models.user import User
from projecteye.schemas.transaction import ApprovalRequest, TransactionCreate, TransactionUpdate
from projecteye.services.project_service import get_project

logger = logging.getLogger(__name__)

aggregator = FinancialAggregator()


async def _approved_expenses(db: AsyncSession, project_id: str) -> Decimal:
    total = await db.scalar(
        select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.project_id == project_id,
            Transaction.type == TransactionType.EXPENSE,
            Transaction.approval_status == ApprovalStatus.APPROVED,
        )
    )
    return Decimal(str(total or 0))


async def _get_pending(db: AsyncSession, project_id: str, transaction_id: str) -> Transaction:
    txn = await get_transaction(db, project_id, transaction_id)
    if txn.approval_status != ApprovalStatus.PENDING:
        raise ConflictError("Transaction has already been processed")
    return txn


async def create_transaction(
    db: AsyncSession,
    project_id: str,
    data: TransactionCreate,
    user: User,
) -> Transaction:
    project = await get_project(db, project_id)

    if data.type == TransactionType.EXPENSE:
        approved = await _approved_expenses(db, project_id)
        if aggregator.expense_exceeds_budget(project.total_budget, approved, data.amount):
            logger.warning(
                "Expense of %s on project %s exceeds budget %s (approved so far %s)",
                data.amount, project_id, project.total_budget, approved,
            )

    txn = Transaction(
        project_id=project_id,
        type=data.type,
        category=data.category,
        amount=data.amount,
        description=data.description,
        vendor_name=data.vendor_name,
        bill_number=data.bill_number,
        bill_date=data.bill_date,
        payment_mode=data.payment_mode,
        approval_status=ApprovalStatus.PENDING,
        created_by=user.id,
    )
    db.add(txn)
    await db.flush()
    await db.refresh(txn)
    logger.info("Created %s transaction %s for %s on project %s", txn.type.value, txn.id, txn.amount, project_id)
    return txn


async def get_transaction(db: AsyncSession, project_id: str, transaction_id: str) -> Transaction:
    result = await db.execute(
        select(Transaction).where(Transaction.id == transaction_id, Transaction.project_id == project_id)
    )
    txn = result.scalar_one_or_none()
    if not txn:
        raise NotFoundError("Transaction not found")
    return txn


async def update_transaction(
    db: AsyncSession,
    project_id: str,
    transaction_id: str,
    data: TransactionUpdate,
) -> Transaction:
    """Edit a transaction. Only PENDING transactions can change."""
    txn = await _get_pending(db, project_id, transaction_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key in ("category", "amount", "payment_mode"):
            continue
        setattr(txn, key, value)
    await db.flush()
    await db.refresh(txn)
    return txn


async def approve_transaction(
    db: AsyncSession,
    project_id: str,
    transaction_id: str,
    data: ApprovalRequest,
    approver: User,
) -> Transaction:
    """PENDING -> APPROVED or REJECTED. There is no way back."""
    txn = await _get_pending(db, project_id, transaction_id)
    txn.approval_status = ApprovalStatus(data.status)
    txn.approved_by = approver.id
    txn.approved_at = datetime.now(timezone.utc)
    txn.remarks = data.remarks
    await db.flush()
    await db.refresh(txn)
    logger.info("Transaction %s %s by %s", txn.id, txn.approval_status.value, approver.id)
    return txn


async def delete_transaction(db: AsyncSession, project_id: str, transaction_id: str) -> None:
    txn = await _get_pending(db, project_id, transaction_id)
    await db.delete(txn)
    await db.flush()
    logger.info("Deleted transaction %s from project %s", transaction_id, project_id)


async def list_transactions(
    db: AsyncSession,
    project_id: str,
    page: int,
    limit: int,
    txn_type: TransactionType | None = None,
    approval_status: ApprovalStatus | None = None,
    category: str | None = None,
    min_amount: Decimal | None = None,
    max_amount: Decimal | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[list[Transaction], int]:
    """Filtered transactions, newest first. Returns (page items, total)."""
    await get_project(db, project_id)
    query = select(Transaction).where(Transaction.project_id == project_id)
    if txn_type:
        query = query.where(Transaction.type == txn_type)
    if approval_status:
        query = query.where(Transaction.approval_status == approval_status)
    if category:
        query = query.where(Transaction.category == category)
    if min_amount is not None:
        query = query.where(Transaction.amount >= min_amount)
    if max_amount is not None:
        query = query.where(Transaction.amount <= max_amount)
    if start_date:
        query = query.where(Transaction.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
    if end_date:
        next_day = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
        query = query.where(Transaction.created_at < next_day)

    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(
        query.order_by(Transaction.created_at.desc()).offset((page - 1) * limit).limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def get_financial_summary(db: AsyncSession, project_id: str) -> FinancialSummary:
    project = await get_project(db, project_id)
    result = await db.execute(select(Transaction).where(Transaction.project_id == project_id))
    return aggregator.summarize(project.total_budget, result.scalars().all())
