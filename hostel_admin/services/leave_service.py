"""
Student leave requests: application, review and gate movements.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from hostel_admin.models.config import LeaveTypeConfig
from hostel_admin.models.leave import LeaveRequest
from hostel_admin.repositories.base import PageResult
from hostel_admin.repositories.config_repository import BlackoutDateRepository, LeaveTypeConfigRepository
from hostel_admin.repositories.leave_repository import LeaveRepository
from hostel_admin.repositories.user_repository import UserRepository
from hostel_admin.schemas.common.enums import (
    AuditAction,
    CommunicationChannel,
    CommunicationContext,
    LeaveStatus,
    LeaveType,
    UserRole,
    Vertical,
)
from hostel_admin.schemas.leave import LeaveCreate, LeaveStats
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
from hostel_admin.services.communication_service import CommunicationService
from hostel_admin.utils.datetime_utils import local_today, month_bounds, utcnow

# leaves that hold the student's dates
BLOCKING_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED, LeaveStatus.CHECKED_OUT)
# leaves that count against per-month and per-semester limits
COUNTED_STATUSES = BLOCKING_STATUSES + (LeaveStatus.RETURNED,)
BLACKOUT_EXEMPT = (LeaveType.EMERGENCY, LeaveType.MEDICAL)


def days_per_month(start: date, end: date) -> Dict[date, int]:
    """Days of the closed range [start, end] falling in each month, keyed by month start."""
    counts: Dict[date, int] = defaultdict(int)
    day = start
    while day <= end:
        month_start, next_month = month_bounds(day)
        chunk_end = min(end, next_month - timedelta(days=1))
        counts[month_start] += (chunk_end - day).days + 1
        day = chunk_end + timedelta(days=1)
    return counts


def semester_bounds(day: date):
    """January-June and July-December halves."""
    if day.month <= 6:
        return date(day.year, 1, 1), date(day.year, 6, 30)
    return date(day.year, 7, 1), date(day.year, 12, 31)


def overlap_days(start_a: date, end_a: date, start_b: date, end_b: date) -> int:
    return max(0, (min(end_a, end_b) - max(start_a, start_b)).days + 1)


class LeaveService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = LeaveRepository(db)
        self.leave_types = LeaveTypeConfigRepository(db)
        self.blackouts = BlackoutDateRepository(db)
        self.users = UserRepository(db)
        self.audit = AuditService(db)
        self.communications = CommunicationService(db)

    def create(self, caller: CurrentUser, data: LeaveCreate) -> LeaveRequest:
        if caller.role != UserRole.STUDENT:
            raise AuthorizationError("Only students can apply for leave")
        student = self.users.find_by_id(caller.id)
        if student is None or student.vertical is None:
            raise NotFoundError("Student", caller.id)
        vertical = student.vertical

        if data.start_date < local_today():
            raise ValidationError("Start date cannot be in the past", field="startDate")

        config = self.leave_types.for_type(data.leave_type)
        if config is not None:
            if not config.active:
                raise BusinessRuleViolation("leave_type_inactive", f"{config.name} is not available")
            if config.allowed_verticals and vertical.value not in config.allowed_verticals:
                raise BusinessRuleViolation(
                    "leave_type_vertical", f"{config.name} is not available for the {vertical.value} vertical"
                )

        if self.repository.overlapping(student.id, data.start_date, data.end_date, BLOCKING_STATUSES):
            raise ConflictError("Leave dates overlap with an existing leave request")

        if data.leave_type not in BLACKOUT_EXEMPT:
            for blackout in self.blackouts.overlapping(data.start_date, data.end_date):
                if not blackout.verticals or vertical.value in blackout.verticals:
                    raise BusinessRuleViolation(
                        "blackout_period",
                        f"Leave is not allowed during {blackout.name} "
                        f"({blackout.start_date.isoformat()} to {blackout.end_date.isoformat()})",
                    )

        if config is not None:
            self._check_limits(student.id, data, config)

        auto_approve = config is not None and not config.requires_approval
        now = utcnow()
        with self.transaction():
            leave = self.repository.add(
                LeaveRequest(
                    student_id=student.id,
                    vertical=vertical,
                    leave_type=data.leave_type,
                    start_date=data.start_date,
                    end_date=data.end_date,
                    reason=data.reason,
                    destination=data.destination,
                    contact_during_leave=data.contact_during_leave,
                    status=LeaveStatus.APPROVED if auto_approve else LeaveStatus.PENDING,
                    applied_at=now,
                    approved_at=now if auto_approve else None,
                    parent_notified=False,
                )
            )
            self.audit.log(
                AuditAction.CREATE, "leave", leave.id, caller,
                new_value={
                    "leave_type": data.leave_type,
                    "start_date": data.start_date,
                    "end_date": data.end_date,
                    "status": leave.status,
                },
            )
            if auto_approve:
                self._notify_parents(leave)
        return leave

    def approve(self, caller: CurrentUser, leave_id: str, notes: Optional[str] = None) -> LeaveRequest:
        leave = self._get_for_staff(caller, leave_id)
        self._require_status(leave, (LeaveStatus.PENDING,), "Only pending leave requests can be approved")
        with self.transaction():
            leave.status = LeaveStatus.APPROVED
            leave.approved_by = caller.id
            leave.approved_at = utcnow()
            if notes:
                leave.append_note(f"Approved: {notes}")
            self._notify_parents(leave)
            self.audit.log_status_change("leave", leave.id, LeaveStatus.PENDING, LeaveStatus.APPROVED, caller)
        return leave

    def reject(self, caller: CurrentUser, leave_id: str, reason: str) -> LeaveRequest:
        leave = self._get_for_staff(caller, leave_id)
        self._require_status(leave, (LeaveStatus.PENDING,), "Only pending leave requests can be rejected")
        with self.transaction():
            leave.status = LeaveStatus.REJECTED
            leave.rejected_by = caller.id
            leave.rejected_at = utcnow()
            leave.rejection_reason = reason
            self.audit.log_status_change(
                "leave", leave.id, LeaveStatus.PENDING, LeaveStatus.REJECTED, caller, metadata={"reason": reason}
            )
        return leave

    def checkout(self, caller: CurrentUser, leave_id: str, notes: Optional[str] = None) -> LeaveRequest:
        leave = self._get_for_staff(caller, leave_id)
        self._require_status(leave, (LeaveStatus.APPROVED,), "Only approved leave can be checked out")
        with self.transaction():
            leave.status = LeaveStatus.CHECKED_OUT
            leave.checked_out_at = utcnow()
            leave.append_note(f"Checked out{': ' + notes if notes else ''}")
            self.audit.log_status_change("leave", leave.id, LeaveStatus.APPROVED, LeaveStatus.CHECKED_OUT, caller)
        return leave

    def mark_returned(self, caller: CurrentUser, leave_id: str, notes: Optional[str] = None) -> LeaveRequest:
        leave = self._get_for_staff(caller, leave_id)
        self._require_status(leave, (LeaveStatus.CHECKED_OUT,), "Only checked-out leave can be marked returned")
        with self.transaction():
            leave.status = LeaveStatus.RETURNED
            leave.returned_at = utcnow()
            leave.append_note(f"Returned{': ' + notes if notes else ''}")
            self.audit.log_status_change("leave", leave.id, LeaveStatus.CHECKED_OUT, LeaveStatus.RETURNED, caller)
        return leave

    def cancel(self, caller: CurrentUser, leave_id: str, reason: Optional[str] = None) -> LeaveRequest:
        leave = self._get(leave_id)
        if leave.student_id != caller.id:
            raise AuthorizationError("You can only cancel your own leave requests")
        self._require_status(
            leave, (LeaveStatus.PENDING, LeaveStatus.APPROVED), "Only pending or approved leave can be cancelled"
        )
        with self.transaction():
            old = leave.status
            leave.status = LeaveStatus.CANCELLED
            if reason:
                leave.append_note(f"Cancelled: {reason}")
            self.audit.log_status_change("leave", leave.id, old, LeaveStatus.CANCELLED, caller)
        return leave

    # reads

    def get(self, caller: CurrentUser, leave_id: str) -> LeaveRequest:
        leave = self._get(leave_id)
        self._ensure_can_view(caller, leave)
        return leave

    def list_leaves(
        self,
        caller: CurrentUser,
        page: int = 1,
        limit: int = 20,
        student_id: Optional[str] = None,
        vertical: Optional[Vertical] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> PageResult[LeaveRequest]:
        if caller.role == UserRole.STUDENT:
            student_id, vertical = caller.id, None
        elif caller.role == UserRole.PARENT:
            student_id, vertical = self._ward_id(caller), None
        else:
            vertical = self.scoped_vertical(caller, vertical)
        query = self.repository.filtered(student_id=student_id, vertical=vertical, status=status, leave_type=leave_type)
        return self.repository.paginate(query, page, limit)

    def recent_for_student(self, student_id: str, limit: int = 5) -> List[LeaveRequest]:
        return self.repository.filtered(student_id=student_id).limit(limit).all()

    def pending(self, caller: CurrentUser, vertical: Optional[Vertical] = None) -> List[LeaveRequest]:
        return self.repository.pending(self.scoped_vertical(caller, vertical))

    def stats(self, caller: Optional[CurrentUser] = None, vertical: Optional[Vertical] = None) -> LeaveStats:
        if caller is not None:
            vertical = self.scoped_vertical(caller, vertical)
        counts = self.repository.count_by(LeaveRequest.status, {"vertical": vertical})
        month_start, next_month = month_bounds(local_today())

        def count(status: LeaveStatus) -> int:
            return next((n for s, n in counts.items() if LeaveStatus(s) == status), 0)

        return LeaveStats(
            pending=count(LeaveStatus.PENDING),
            approved=count(LeaveStatus.APPROVED),
            checked_out=count(LeaveStatus.CHECKED_OUT),
            returned=count(LeaveStatus.RETURNED),
            total_this_month=self.repository.count_applied_between(month_start, next_month, vertical=vertical),
        )

    # helpers

    def _get(self, leave_id: str) -> LeaveRequest:
        leave = self.repository.find_by_id(leave_id)
        if leave is None:
            raise NotFoundError("Leave request", leave_id)
        return leave

    def _get_for_staff(self, caller: CurrentUser, leave_id: str) -> LeaveRequest:
        leave = self._get(leave_id)
        self.ensure_vertical_access(caller, leave.vertical)
        return leave

    def _ward_id(self, caller: CurrentUser) -> str:
        parent = self.users.find_by_id(caller.id)
        if parent is None or not parent.guardian_of_id:
            raise AuthorizationError("No student is linked to this account")
        return parent.guardian_of_id

    def _ensure_can_view(self, caller: CurrentUser, leave: LeaveRequest) -> None:
        if caller.role == UserRole.STUDENT:
            if leave.student_id != caller.id:
                raise AuthorizationError("You can only view your own leave requests")
        elif caller.role == UserRole.PARENT:
            if leave.student_id != self._ward_id(caller):
                raise AuthorizationError("You can only view your ward's leave requests")
        else:
            self.ensure_vertical_access(caller, leave.vertical)

    @staticmethod
    def _require_status(leave: LeaveRequest, allowed, message: str) -> None:
        if leave.status not in allowed:
            raise BusinessRuleViolation("leave_status", message, details={"status": leave.status.value})

    def _check_limits(self, student_id: str, data: LeaveCreate, config: LeaveTypeConfig) -> None:
        if config.max_days_per_month:
            requested = days_per_month(data.start_date, data.end_date)
            window_start = min(requested)
            _, window_end = month_bounds(max(requested))
            existing = [
                leave for leave in self.repository.overlapping(
                    student_id, window_start, window_end - timedelta(days=1), COUNTED_STATUSES
                )
                if leave.leave_type == data.leave_type
            ]
            for month_start, days in requested.items():
                _, next_month = month_bounds(month_start)
                month_end = next_month - timedelta(days=1)
                used = sum(overlap_days(other.start_date, other.end_date, month_start, month_end) for other in existing)
                if used + days > config.max_days_per_month:
                    raise BusinessRuleViolation(
                        "monthly_limit",
                        f"{config.name} is limited to {config.max_days_per_month} days per month "
                        f"({used} already used in {month_start.strftime('%B %Y')})",
                    )

        if config.max_days_per_semester:
            # a leave across 30 June / 1 July counts against both halves
            for sem_start, sem_end in sorted({semester_bounds(data.start_date), semester_bounds(data.end_date)}):
                requested_days = overlap_days(data.start_date, data.end_date, sem_start, sem_end)
                used = sum(
                    overlap_days(other.start_date, other.end_date, sem_start, sem_end)
                    for other in self.repository.overlapping(student_id, sem_start, sem_end, COUNTED_STATUSES)
                    if other.leave_type == data.leave_type
                )
                if used + requested_days > config.max_days_per_semester:
                    raise BusinessRuleViolation(
                        "semester_limit",
                        f"{config.name} is limited to {config.max_days_per_semester} days per semester "
                        f"({used} already used since {sem_start.strftime('%B %Y')})",
                    )

    def _notify_parents(self, leave: LeaveRequest) -> None:
        """Text linked parents about an approved leave; failures are kept on the message log."""
        student = leave.student or self.users.find_by_id(leave.student_id)
        phones = [p.mobile for p in self.users.find_parents_of(leave.student_id) if p.mobile]
        if phones:
            self.communications.dispatch(
                channel=CommunicationChannel.SMS,
                recipients=phones,
                context=CommunicationContext.LEAVE,
                template_key="leave_approved",
                variables={
                    "studentName": student.full_name if student else "Your ward",
                    "leaveType": leave.leave_type.value.lower(),
                    "startDate": leave.start_date.isoformat(),
                    "endDate": leave.end_date.isoformat(),
                },
                related_entity_type="leave",
                related_entity_id=leave.id,
            )
        leave.parent_notified = True
        leave.parent_notified_at = utcnow()
