"""
Per-role dashboard summaries.
"""

from sqlalchemy.orm import Session

from hostel_admin.models.application import Application
from hostel_admin.repositories.application_repository import ApplicationRepository
from hostel_admin.schemas.application import ApplicationSummary
from hostel_admin.schemas.common.enums import Vertical
from hostel_admin.schemas.dashboard import (
    AccountsDashboard,
    ParentDashboard,
    StudentDashboard,
    SuperintendentDashboard,
    TrusteeDashboard,
)
from hostel_admin.schemas.leave import LeaveResponse
from hostel_admin.schemas.room import AllocationResponse
from hostel_admin.schemas.user import UserResponse
from hostel_admin.services.application_service import ApplicationService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import AuthorizationError, NotFoundError
from hostel_admin.services.leave_service import LeaveService
from hostel_admin.services.payment_service import PaymentService
from hostel_admin.services.renewal_service import RenewalService
from hostel_admin.services.room_service import RoomService
from hostel_admin.services.user_service import UserService


class DashboardService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.users = UserService(db)
        self.applications = ApplicationService(db)
        self.application_repo = ApplicationRepository(db)
        self.rooms = RoomService(db)
        self.leaves = LeaveService(db)
        self.payments = PaymentService(db)
        self.renewals = RenewalService(db)

    def student(self, caller: CurrentUser) -> StudentDashboard:
        profile = self.users.get_user(caller.id)
        application = self.applications.latest_for_student(caller.id)
        allocation = self.rooms.student_allocation(caller.id)
        return StudentDashboard(
            profile=UserResponse.model_validate(profile),
            application=ApplicationSummary.model_validate(application) if application else None,
            allocation=AllocationResponse.model_validate(allocation) if allocation else None,
            renewal=self.renewals.build(allocation) if allocation else None,
            fees=self.payments.summary(caller, caller.id),
            recent_leaves=[LeaveResponse.model_validate(leave) for leave in self.leaves.recent_for_student(caller.id)],
        )

    def superintendent(self, caller: CurrentUser) -> SuperintendentDashboard:
        vertical = caller.vertical
        if vertical is None:
            raise AuthorizationError("No vertical is assigned to this account")
        return SuperintendentDashboard(
            vertical=vertical.value,
            applications_by_status=self.applications.stats(caller).by_status,
            pending_leaves=[LeaveResponse.model_validate(leave) for leave in self.leaves.pending(caller)],
            leave_stats=self.leaves.stats(caller),
            occupancy=self.rooms.availability(caller),
            renewals_due=self.renewals.count_due(vertical),
        )

    def trustee(self, caller: CurrentUser) -> TrusteeDashboard:
        by_vertical = {v.value: 0 for v in Vertical}
        for vertical, total in self.application_repo.count_by(Application.vertical).items():
            by_vertical[Vertical(vertical).value] = total
        totals = self.payments.totals()
        return TrusteeDashboard(
            applications_by_status=self.applications.stats(caller).by_status,
            applications_by_vertical=by_vertical,
            occupancy=[self.rooms.availability(caller, v) for v in Vertical],
            leave_stats=self.leaves.stats(caller),
            fees_collected=totals["total_collected"],
            fees_outstanding=totals["total_outstanding"],
        )

    def accounts(self, caller: CurrentUser) -> AccountsDashboard:
        return AccountsDashboard(**self.payments.totals())

    def parent(self, caller: CurrentUser) -> ParentDashboard:
        parent = self.users.get_user(caller.id)
        if not parent.guardian_of_id:
            raise NotFoundError("Student", message="No student is linked to this account")
        student = self.users.get_user(parent.guardian_of_id)
        allocation = self.rooms.student_allocation(student.id)
        return ParentDashboard(
            student=UserResponse.model_validate(student),
            allocation=AllocationResponse.model_validate(allocation) if allocation else None,
            fees=self.payments.summary(caller, student.id),
            recent_leaves=[LeaveResponse.model_validate(leave) for leave in self.leaves.recent_for_student(student.id)],
        )
