"""Fee and payment data access."""

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Query, Session

from hostel_admin.models.fee import Fee, Payment
from hostel_admin.repositories.base import BaseRepository
from hostel_admin.schemas.common.enums import PaymentStatus


class FeeRepository(BaseRepository[Fee]):

    def __init__(self, db: Session):
        super().__init__(Fee, db)

    def filtered(self, student_id=None, status=None, fee_type=None) -> Query:
        query = self._apply_criteria(
            self.query(), {"student_id": student_id, "status": status, "fee_type": fee_type}
        )
        return query.order_by(Fee.due_date.asc(), Fee.created_at.asc())

    def for_student(self, student_id: str) -> List[Fee]:
        return self.filtered(student_id=student_id).all()

    def past_due_unpaid(self, today: date, student_id: Optional[str] = None) -> List[Fee]:
        """PENDING fees past their due date; partially paid fees are left alone."""
        query = self.query().filter(Fee.status == PaymentStatus.PENDING, Fee.due_date < today)
        if student_id:
            query = query.filter(Fee.student_id == student_id)
        return query.all()


class PaymentRepository(BaseRepository[Payment]):

    def __init__(self, db: Session):
        super().__init__(Payment, db)

    def last_receipt_number(self, prefix: str) -> Optional[str]:
        row = (
            self.db.query(Payment.receipt_number)
            .filter(Payment.receipt_number.like(f"{prefix}%"))
            .order_by(Payment.receipt_number.desc())
            .first()
        )
        return row[0] if row else None

    def filtered(self, student_id=None, verified=None, method=None) -> Query:
        query = self._apply_criteria(
            self.query(), {"student_id": student_id, "verified": verified, "method": method}
        )
        return query.order_by(Payment.paid_at.desc())
