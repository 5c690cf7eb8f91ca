"""
Fee ledger, payment recording and receipts.
"""

from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.orm import Session

from hostel_admin.models.fee import Fee, Payment
from hostel_admin.repositories.base import PageResult
from hostel_admin.repositories.fee_repository import FeeRepository, PaymentRepository
from hostel_admin.repositories.user_repository import UserRepository
from hostel_admin.schemas.common.enums import (
    AuditAction,
    FeeType,
    PaymentMethod,
    PaymentStatus,
    UserRole,
)
from hostel_admin.schemas.payment import FeeCreate, FeeResponse, FeeSummary, PaymentCreate
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import (
    AuthorizationError,
    BusinessRuleViolation,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from hostel_admin.utils.datetime_utils import local_today, utcnow

RECEIPT_PREFIX = "RCP"
ZERO = Decimal("0.00")


def derive_status(fee: Fee, today) -> PaymentStatus:
    """
    Status implied by the amounts and due date of an unwaived fee.

    Only fees with nothing paid go OVERDUE; once a payment lands the fee
    stays PARTIALLY_PAID until the balance is cleared.
    """
    if fee.status == PaymentStatus.WAIVED:
        return PaymentStatus.WAIVED
    if fee.balance <= 0:
        return PaymentStatus.PAID
    if Decimal(fee.paid_amount or 0) > 0:
        return PaymentStatus.PARTIALLY_PAID
    if fee.due_date < today:
        return PaymentStatus.OVERDUE
    return PaymentStatus.PENDING


class PaymentService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.fees = FeeRepository(db)
        self.payments = PaymentRepository(db)
        self.users = UserRepository(db)
        self.audit = AuditService(db)

    # -------------------------------------------------------------------------
    # Fees
    # -------------------------------------------------------------------------

    def create_fee(self, caller: CurrentUser, data: FeeCreate) -> Fee:
        student = self.users.find_by_id(data.student_id)
        if student is None or student.role != UserRole.STUDENT:
            raise NotFoundError("Student", data.student_id)

        with self.transaction():
            fee = Fee(
                student_id=student.id,
                fee_type=data.fee_type,
                description=data.description,
                amount=data.amount,
                paid_amount=ZERO,
                due_date=data.due_date,
                status=PaymentStatus.PENDING,
                academic_year=data.academic_year,
                created_by=caller.id,
            )
            fee.status = derive_status(fee, local_today())
            self.fees.add(fee)
            self.audit.log(
                AuditAction.CREATE, "fee", fee.id, caller,
                new_value={"student_id": student.id, "fee_type": data.fee_type, "amount": str(data.amount)},
            )
        return fee

    def get_fee(self, caller: CurrentUser, fee_id: str) -> Fee:
        fee = self._get_fee(fee_id)
        self._ensure_can_view(caller, fee.student_id)
        return fee

    def list_fees(
        self,
        caller: CurrentUser,
        page: int = 1,
        limit: int = 20,
        student_id: Optional[str] = None,
        status: Optional[PaymentStatus] = None,
        fee_type: Optional[FeeType] = None,
    ) -> PageResult[Fee]:
        student_id = self._scoped_student(caller, student_id)
        self.refresh_overdue(student_id)
        query = self.fees.filtered(student_id=student_id, status=status, fee_type=fee_type)
        return self.fees.paginate(query, page, limit)

    def waive_fee(self, caller: CurrentUser, fee_id: str, reason: str) -> Fee:
        fee = self._get_fee(fee_id)
        if fee.is_settled:
            raise BusinessRuleViolation("fee_settled", f"Fee is already {fee.status.value.lower()}")
        with self.transaction():
            old = fee.status
            fee.status = PaymentStatus.WAIVED
            fee.waived_by = caller.id
            fee.waived_at = utcnow()
            fee.waiver_reason = reason
            self.audit.log_status_change("fee", fee.id, old, PaymentStatus.WAIVED, caller, metadata={"reason": reason})
        return fee

    def refresh_overdue(self, student_id: Optional[str] = None) -> int:
        """Mark fees with nothing paid and past their due date as OVERDUE."""
        stale = self.fees.past_due_unpaid(local_today(), student_id)
        if not stale:
            return 0
        with self.transaction():
            for fee in stale:
                fee.status = PaymentStatus.OVERDUE
        self._logger.info(f"{len(stale)} fee(s) marked overdue")
        return len(stale)

    def summary(self, caller: CurrentUser, student_id: str) -> FeeSummary:
        self._ensure_can_view(caller, student_id)
        self.refresh_overdue(student_id)
        fees = self.fees.for_student(student_id)

        billable = [f for f in fees if f.status != PaymentStatus.WAIVED]
        overdue = [f for f in fees if f.status == PaymentStatus.OVERDUE]
        return FeeSummary(
            student_id=student_id,
            total_due=float(sum((Decimal(f.amount) for f in billable), ZERO)),
            total_paid=float(sum((Decimal(f.paid_amount or 0) for f in billable), ZERO)),
            total_pending=float(sum((f.balance for f in billable), ZERO)),
            overdue_count=len(overdue),
            overdue_fees=[FeeResponse.model_validate(f) for f in overdue],
            fees=[FeeResponse.model_validate(f) for f in fees],
        )

    def totals(self) -> Dict[str, object]:
        """Ledger-wide figures for the accounts dashboard."""
        self.refresh_overdue()
        fees = self.fees.query().all()
        billable = [f for f in fees if f.status != PaymentStatus.WAIVED]
        by_status = {s.value: 0 for s in PaymentStatus}
        for fee in fees:
            by_status[fee.status.value] += 1
        return {
            "total_billed": float(sum((Decimal(f.amount) for f in billable), ZERO)),
            "total_collected": float(sum((Decimal(f.paid_amount or 0) for f in billable), ZERO)),
            "total_outstanding": float(sum((f.balance for f in billable), ZERO)),
            "overdue_count": by_status[PaymentStatus.OVERDUE.value],
            "unverified_payments": self.payments.count({"verified": False}),
            "fees_by_status": by_status,
        }

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def record_payment(self, caller: CurrentUser, data: PaymentCreate) -> Payment:
        fee = self._get_fee(data.fee_id)
        if fee.is_settled:
            raise BusinessRuleViolation("fee_settled", f"Fee is already {fee.status.value.lower()}")
        if data.amount > fee.balance:
            raise ValidationError(
                f"Payment amount exceeds the outstanding balance ({fee.balance:.2f})", field="amount"
            )

        with self.transaction():
            payment = self.payments.add(
                Payment(
                    fee_id=fee.id,
                    student_id=fee.student_id,
                    amount=data.amount,
                    method=data.method,
                    receipt_number=self._next_receipt_number(),
                    transaction_reference=data.transaction_reference,
                    paid_at=utcnow(),
                    recorded_by=caller.id,
                    verified=False,
                    notes=data.notes,
                )
            )
            old_status = fee.status
            fee.paid_amount = Decimal(fee.paid_amount or 0) + data.amount
            fee.status = derive_status(fee, local_today())
            self.audit.log(
                AuditAction.PAYMENT, "payment", payment.id, caller,
                old_value={"fee_status": old_status},
                new_value={
                    "fee_status": fee.status,
                    "amount": str(data.amount),
                    "receipt_number": payment.receipt_number,
                },
            )
        self._logger.info(f"Payment {payment.receipt_number} of {data.amount} recorded against fee {fee.id}")
        return payment

    def verify_payment(self, caller: CurrentUser, payment_id: str) -> Payment:
        payment = self.payments.find_by_id(payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        if payment.verified:
            raise ConflictError("Payment has already been verified")
        with self.transaction():
            payment.verified = True
            payment.verified_by = caller.id
            payment.verified_at = utcnow()
            self.audit.log(AuditAction.UPDATE, "payment", payment.id, caller, new_value={"verified": True})
        return payment

    def get_payment(self, caller: CurrentUser, payment_id: str) -> Payment:
        payment = self.payments.find_by_id(payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        self._ensure_can_view(caller, payment.student_id)
        return payment

    def list_payments(
        self,
        caller: CurrentUser,
        page: int = 1,
        limit: int = 20,
        student_id: Optional[str] = None,
        verified: Optional[bool] = None,
        method: Optional[PaymentMethod] = None,
    ) -> PageResult[Payment]:
        student_id = self._scoped_student(caller, student_id)
        query = self.payments.filtered(student_id=student_id, verified=verified, method=method)
        return self.payments.paginate(query, page, limit)

    # helpers

    def _get_fee(self, fee_id: str) -> Fee:
        fee = self.fees.find_by_id(fee_id)
        if fee is None:
            raise NotFoundError("Fee", fee_id)
        return fee

    def _ward_id(self, caller: CurrentUser) -> Optional[str]:
        parent = self.users.find_by_id(caller.id)
        return parent.guardian_of_id if parent else None

    def _scoped_student(self, caller: CurrentUser, student_id: Optional[str]) -> Optional[str]:
        if caller.role == UserRole.STUDENT:
            return caller.id
        if caller.role == UserRole.PARENT:
            ward = self._ward_id(caller)
            if ward is None:
                raise AuthorizationError("No student is linked to this account")
            return ward
        return student_id

    def _ensure_can_view(self, caller: CurrentUser, student_id: str) -> None:
        if caller.role == UserRole.STUDENT and student_id != caller.id:
            raise AuthorizationError("You can only view your own fees")
        if caller.role == UserRole.PARENT and student_id != self._ward_id(caller):
            raise AuthorizationError("You can only view your ward's fees")

    def _next_receipt_number(self) -> str:
        prefix = f"{RECEIPT_PREFIX}-{utcnow().year}-"
        last = self.payments.last_receipt_number(prefix)
        sequence = int(last.rsplit("-", 1)[1]) + 1 if last else 1
        return f"{prefix}{sequence:05d}"
