"""Leave request data access."""

from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from hostel_admin.models.leave import LeaveRequest
from hostel_admin.repositories.base import BaseRepository
from hostel_admin.schemas.common.enums import LeaveStatus


class LeaveRepository(BaseRepository[LeaveRequest]):

    def __init__(self, db: Session):
        super().__init__(LeaveRequest, db)

    def overlapping(
        self,
        student_id: str,
        start: date,
        end: date,
        statuses: Iterable[LeaveStatus],
        exclude_id: Optional[str] = None,
    ) -> List[LeaveRequest]:
        """Leaves of ``student_id`` whose closed date range intersects [start, end]."""
        query = self.query().filter(
            LeaveRequest.student_id == student_id,
            LeaveRequest.status.in_(list(statuses)),
            LeaveRequest.start_date <= end,
            LeaveRequest.end_date >= start,
        )
        if exclude_id:
            query = query.filter(LeaveRequest.id != exclude_id)
        return query.all()

    def filtered(self, student_id=None, vertical=None, status=None, leave_type=None) -> Query:
        query = self._apply_criteria(
            self.query(),
            {"student_id": student_id, "vertical": vertical, "status": status, "leave_type": leave_type},
        )
        return query.order_by(LeaveRequest.applied_at.desc())

    def pending(self, vertical=None) -> List[LeaveRequest]:
        return self.find_by_criteria(
            {"status": LeaveStatus.PENDING, "vertical": vertical},
            order_by=[LeaveRequest.applied_at.asc()],
        )

    def count_applied_between(self, start: date, end: date, vertical=None, student_id=None) -> int:
        """Leaves applied for on or after ``start`` and before ``end``."""
        query = self._apply_criteria(
            self.db.query(func.count(LeaveRequest.id)),
            {"vertical": vertical, "student_id": student_id},
        )
        return query.filter(
            func.date(LeaveRequest.applied_at) >= start,
            func.date(LeaveRequest.applied_at) < end,
        ).scalar() or 0
