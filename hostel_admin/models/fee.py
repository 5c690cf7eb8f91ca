"""
Fees charged to students and payments recorded against them.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Enum as SQLEnum, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_admin.models.base import TimestampModel
from hostel_admin.schemas.common.enums import FeeType, PaymentMethod, PaymentStatus

__all__ = ["Fee", "Payment"]


class Fee(TimestampModel):
    """
    Amount owed by a student.

    ``paid_amount`` accumulates recorded payments; a waived fee is treated
    as fully paid.
    """

    __tablename__ = "fees"
    __table_args__ = (
        Index("idx_fees_student_status", "student_id", "status"),
        {"comment": "Student fee ledger"},
    )

    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    fee_type: Mapped[FeeType] = mapped_column(SQLEnum(FeeType, name="fee_type"), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus, name="payment_status"), nullable=False, default=PaymentStatus.PENDING
    )
    academic_year: Mapped[Optional[str]] = mapped_column(String(9), nullable=True, comment="e.g. 2024-2025")
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    waived_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    waived_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    waiver_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    payments = relationship("Payment", back_populates="fee", order_by="Payment.paid_at")
    student = relationship("User")

    @property
    def balance(self) -> Decimal:
        return max(Decimal("0"), Decimal(self.amount) - Decimal(self.paid_amount or 0))

    @property
    def is_settled(self) -> bool:
        return self.status in (PaymentStatus.PAID, PaymentStatus.WAIVED)


class Payment(TimestampModel):
    """Money received against a fee."""

    __tablename__ = "payments"

    fee_id: Mapped[str] = mapped_column(String(36), ForeignKey("fees.id"), nullable=False, index=True)
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(SQLEnum(PaymentMethod, name="payment_method"), nullable=False)
    receipt_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, comment="RCP-YYYY-NNNNN"
    )
    transaction_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    paid_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    recorded_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    fee = relationship("Fee", back_populates="payments")
