"""Financial summary engine - deterministic, Decimal only."""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

from projecteye.models.transaction import ApprovalStatus, TransactionType


class _TransactionLike(Protocol):
    type: TransactionType
    category: str
    amount: Decimal
    approval_status: ApprovalStatus
    created_at: datetime


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class MonthlyTotal:
    month: str
    amount: Decimal


@dataclass(frozen=True)
class BurnPoint:
    day: date
    cumulative_spent: Decimal
    budget_remaining: Decimal


@dataclass(frozen=True)
class BurnRate:
    total_budget: Decimal
    total_days: int
    daily_budget_target: Decimal
    points: list[BurnPoint] = field(default_factory=list)


@dataclass(frozen=True)
class FinancialSummary:
    total_budget: Decimal
    total_expenses: Decimal
    total_payments: Decimal
    total_advances: Decimal
    pending_approvals: int
    remaining_budget: Decimal
    budget_utilization: Decimal | None
    category_breakdown: list[CategoryTotal] = field(default_factory=list)
    monthly_expenses: list[MonthlyTotal] = field(default_factory=list)


class FinancialAggregator:
    """Summaries over a project's already-fetched transactions."""

    @staticmethod
    def _round(value: Decimal, places: int = 2) -> Decimal:
        quantize = Decimal(10) ** -places
        return value.quantize(quantize, rounding=ROUND_HALF_UP)

    def percentage(self, part: Decimal, whole: Decimal) -> Decimal | None:
        """part / whole x 100, unclamped. None when whole is zero."""
        if whole == 0:
            return None
        return self._round(part / whole * Decimal(100))

    def summarize(
        self,
        total_budget: Decimal,
        transactions: Iterable[_TransactionLike],
    ) -> FinancialSummary:
        """Totals count APPROVED transactions only; pending_approvals counts every type."""
        totals = {t: Decimal(0) for t in TransactionType}
        by_category: dict[str, Decimal] = defaultdict(Decimal)
        by_month: dict[str, Decimal] = defaultdict(Decimal)
        pending = 0

        for txn in transactions:
            if txn.approval_status == ApprovalStatus.PENDING:
                pending += 1
                continue
            if txn.approval_status != ApprovalStatus.APPROVED:
                continue
            amount = Decimal(txn.amount)
            totals[TransactionType(txn.type)] += amount
            if txn.type == TransactionType.EXPENSE:
                by_category[txn.category] += amount
                by_month[txn.created_at.strftime("%Y-%m")] += amount

        total_expenses = totals[TransactionType.EXPENSE]
        category_breakdown = [
            CategoryTotal(
                category=category,
                amount=amount,
                percentage=self.percentage(amount, total_expenses) or Decimal(0),
            )
            for category, amount in by_category.items()
        ]
        monthly = [MonthlyTotal(month=m, amount=by_month[m]) for m in sorted(by_month)]

        return FinancialSummary(
            total_budget=total_budget,
            total_expenses=total_expenses,
            total_payments=totals[TransactionType.PAYMENT],
            total_advances=totals[TransactionType.ADVANCE],
            pending_approvals=pending,
            remaining_budget=total_budget - total_expenses,
            budget_utilization=self.percentage(total_expenses, total_budget),
            category_breakdown=category_breakdown,
            monthly_expenses=monthly,
        )

    def expense_exceeds_budget(
        self,
        total_budget: Decimal,
        approved_expenses: Decimal,
        new_amount: Decimal,
    ) -> bool:
        """True when a new expense would take approved spend past the budget."""
        return approved_expenses + new_amount > total_budget

    def burn_rate(
        self,
        total_budget: Decimal,
        transactions: Iterable[_TransactionLike],
        start_date: date,
        end_date: date,
    ) -> BurnRate:
        """Cumulative approved expense spend, one point per day with spend.

        daily_budget_target = total_budget / (end_date - start_date), or 0 for
        a zero-length plan.
        """
        by_day: dict[date, Decimal] = defaultdict(Decimal)
        for txn in transactions:
            if txn.type == TransactionType.EXPENSE and txn.approval_status == ApprovalStatus.APPROVED:
                by_day[txn.created_at.date()] += Decimal(txn.amount)

        points = []
        spent = Decimal(0)
        for day in sorted(by_day):
            spent += by_day[day]
            points.append(BurnPoint(day=day, cumulative_spent=spent, budget_remaining=total_budget - spent))

        total_days = (end_date - start_date).days
        target = self._round(total_budget / Decimal(total_days)) if total_days > 0 else Decimal(0)
        return BurnRate(
            total_budget=total_budget,
            total_days=total_days,
            daily_budget_target=target,
            points=points,
        )
