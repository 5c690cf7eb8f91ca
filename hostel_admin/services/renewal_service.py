"""
Renewal tracking for active room allocations.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_admin.config.settings import settings
from hostel_admin.models.room import RoomAllocation
from hostel_admin.repositories.application_repository import ApplicationRepository
from hostel_admin.repositories.room_repository import AllocationRepository
from hostel_admin.schemas.common.enums import ApplicationType, RenewalStatus, UserRole, Vertical
from hostel_admin.schemas.renewal import RenewalResponse
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import AuthorizationError
from hostel_admin.utils.datetime_utils import add_months, ceil_days, utcnow

DUE_SOON_DAYS = 30
UPCOMING_DAYS = 60


def renewal_status(days_remaining: int) -> RenewalStatus:
    if days_remaining <= 0:
        return RenewalStatus.OVERDUE
    if days_remaining <= DUE_SOON_DAYS:
        return RenewalStatus.DUE_SOON
    if days_remaining <= UPCOMING_DAYS:
        return RenewalStatus.UPCOMING
    return RenewalStatus.NOT_DUE


class RenewalService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.allocations = AllocationRepository(db)
        self.applications = ApplicationRepository(db)

    def build(self, allocation: RoomAllocation, now: Optional[datetime] = None) -> RenewalResponse:
        now = now or utcnow()
        due = add_months(allocation.allocated_at, settings.RENEWAL_PERIOD_MONTHS)
        days_remaining = ceil_days(due - now)

        renewal_application_id = None
        latest = self.applications.latest_for_student(allocation.student_id)
        if latest is not None and latest.type == ApplicationType.RENEWAL and latest.created_at >= allocation.allocated_at:
            renewal_application_id = latest.id

        return RenewalResponse(
            allocation_id=allocation.id,
            student_id=allocation.student_id,
            student_name=allocation.student_name,
            room_number=allocation.room_number,
            vertical=allocation.vertical,
            allocated_at=allocation.allocated_at,
            due_date=due,
            days_remaining=days_remaining,
            status=renewal_status(days_remaining),
            renewal_application_id=renewal_application_id,
        )

    def list_renewals(
        self,
        caller: CurrentUser,
        status: Optional[RenewalStatus] = None,
        vertical: Optional[Vertical] = None,
    ) -> List[RenewalResponse]:
        vertical = self.scoped_vertical(caller, vertical)
        now = utcnow()
        renewals = [self.build(a, now) for a in self.allocations.active(vertical)]
        if status is not None:
            renewals = [r for r in renewals if r.status == status]
        return sorted(renewals, key=lambda r: r.days_remaining)

    def for_student(self, caller: CurrentUser, student_id: Optional[str] = None) -> Optional[RenewalResponse]:
        student_id = student_id or caller.id
        if caller.role == UserRole.STUDENT and student_id != caller.id:
            raise AuthorizationError("You can only view your own renewal")
        allocation = self.allocations.active_for_student(student_id)
        if allocation is None:
            return None
        if caller.role == UserRole.SUPERINTENDENT:
            self.ensure_vertical_access(caller, allocation.vertical)
        return self.build(allocation)

    def count_due(self, vertical: Optional[Vertical] = None) -> int:
        """Allocations that are overdue or due within the warning window."""
        now = utcnow()
        return sum(
            1 for a in self.allocations.active(vertical)
            if self.build(a, now).status in (RenewalStatus.OVERDUE, RenewalStatus.DUE_SOON)
        )
