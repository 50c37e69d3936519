"""Transaction and financial summary schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from projecteye.models.transaction import ApprovalStatus, PaymentMode, TransactionType
from projecteye.schemas.common import Pagination

Category = Literal[
    "MATERIAL",
    "LABOR",
    "EQUIPMENT",
    "TRANSPORTATION",
    "UTILITIES",
    "PROFESSIONAL_FEES",
    "PERMITS",
    "INSURANCE",
    "MISCELLANEOUS",
]


class TransactionCreate(BaseModel):
    type: TransactionType
    category: Category
    amount: Decimal = Field(..., gt=0)
    description: str | None = None
    vendor_name: str | None = Field(None, max_length=100)
    bill_number: str | None = Field(None, max_length=50)
    bill_date: date | None = None
    payment_mode: PaymentMode


class TransactionUpdate(BaseModel):
    category: Category | None = None
    amount: Decimal | None = Field(None, gt=0)
    description: str | None = None
    vendor_name: str | None = Field(None, max_length=100)
    bill_number: str | None = Field(None, max_length=50)
    bill_date: date | None = None
    payment_mode: PaymentMode | None = None


class ApprovalRequest(BaseModel):
    status: Literal["APPROVED", "REJECTED"]
    remarks: str | None = Field(None, max_length=200)


class TransactionResponse(BaseModel):
    id: str
    project_id: str
    type: TransactionType
    category: str
    amount: Decimal
    description: str | None
    vendor_name: str | None
    bill_number: str | None
    bill_date: date | None
    payment_mode: PaymentMode
    approval_status: ApprovalStatus
    created_by: str
    approved_by: str | None
    approved_at: datetime | None
    remarks: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionList(BaseModel):
    items: list[TransactionResponse]
    pagination: Pagination


class CategoryTotal(BaseModel):
    category: str
    amount: Decimal
    percentage: Decimal

    class Config:
        from_attributes = True


class MonthlyTotal(BaseModel):
    month: str
    amount: Decimal

    class Config:
        from_attributes = True


class FinancialSummaryResponse(BaseModel):
    total_budget: Decimal
    total_expenses: Decimal
    total_payments: Decimal
    total_advances: Decimal
    pending_approvals: int
    remaining_budget: Decimal
    budget_utilization: Decimal | None
    category_breakdown: list[CategoryTotal]
    monthly_expenses: list[MonthlyTotal]

    class Config:
        from_attributes = True
