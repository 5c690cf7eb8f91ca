"""
Fee and payment schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_serializer

from hostel_admin.schemas.common.base import BaseDBSchema, BaseSchema
from hostel_admin.schemas.common.enums import FeeType, PaymentMethod, PaymentStatus

__all__ = [
    "FeeCreate",
    "FeeWaive",
    "FeeResponse",
    "PaymentCreate",
    "PaymentResponse",
    "FeeSummary",
]


class FeeCreate(BaseSchema):
    student_id: str
    fee_type: FeeType
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    due_date: date
    description: Optional[str] = Field(default=None, max_length=255)
    academic_year: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{4}$")


class FeeWaive(BaseSchema):
    reason: str = Field(..., min_length=3, max_length=500)


class FeeResponse(BaseDBSchema):
    student_id: str
    fee_type: FeeType
    description: Optional[str] = None
    amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    due_date: date
    status: PaymentStatus
    academic_year: Optional[str] = None
    waived_at: Optional[datetime] = None
    waiver_reason: Optional[str] = None

    @field_serializer("amount", "paid_amount", "balance")
    def money(self, v: Decimal) -> float:
        return float(v)


class PaymentCreate(BaseSchema):
    fee_id: str
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    method: PaymentMethod
    transaction_reference: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=500)


class PaymentResponse(BaseDBSchema):
    fee_id: str
    student_id: str
    amount: Decimal
    method: PaymentMethod
    receipt_number: str
    transaction_reference: Optional[str] = None
    paid_at: datetime
    verified: bool
    verified_at: Optional[datetime] = None
    notes: Optional[str] = None

    @field_serializer("amount")
    def money(self, v: Decimal) -> float:
        return float(v)


class FeeSummary(BaseSchema):
    student_id: str
    total_due: float
    total_paid: float
    total_pending: float
    overdue_count: int
    overdue_fees: List[FeeResponse]
    fees: List[FeeResponse]
