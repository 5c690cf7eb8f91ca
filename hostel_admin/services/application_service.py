"""
Admission and renewal applications.

Applicants without an account work through an OTP session; students work
through their login. Staff review applications of their vertical
(superintendents) or of every vertical (trustees).
"""

from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from hostel_admin.models.application import Application
from hostel_admin.repositories.application_repository import ApplicationRepository
from hostel_admin.repositories.base import PageResult
from hostel_admin.repositories.user_repository import UserRepository
from hostel_admin.schemas.application import (
    ApplicationCreate,
    ApplicationStats,
    ApplicationStatusUpdate,
    ApplicationUpdate,
    TrackingResponse,
)
from hostel_admin.schemas.common.enums import (
    ApplicationStatus,
    ApplicationType,
    AuditAction,
    ConsentContext,
    ContactType,
    InterviewStatus,
    UserRole,
    Vertical,
)
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import ApplicantSession, CurrentUser
from hostel_admin.services.common.errors import (
    AuthorizationError,
    BusinessRuleViolation,
    NotFoundError,
    ValidationError,
)
from hostel_admin.services.consent_service import ConsentService
from hostel_admin.utils.datetime_utils import utcnow
from hostel_admin.utils.sms import normalize_phone_number

Caller = Union[CurrentUser, ApplicantSession]

TRACKING_PREFIX = "HG"

EDITABLE_STATUSES = (ApplicationStatus.DRAFT, ApplicationStatus.SUBMITTED)

# staff-driven transitions; DRAFT -> SUBMITTED happens through submit()
STATUS_TRANSITIONS: Dict[ApplicationStatus, tuple] = {
    ApplicationStatus.DRAFT: (ApplicationStatus.ARCHIVED,),
    ApplicationStatus.SUBMITTED: (
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.REJECTED,
        ApplicationStatus.ARCHIVED,
    ),
    ApplicationStatus.UNDER_REVIEW: (
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.ARCHIVED,
    ),
    ApplicationStatus.INTERVIEW_SCHEDULED: (
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.ARCHIVED,
    ),
    ApplicationStatus.APPROVED: (ApplicationStatus.ARCHIVED,),
    ApplicationStatus.REJECTED: (ApplicationStatus.ARCHIVED,),
    ApplicationStatus.ARCHIVED: (),
}


def append_history(application: Application, status: ApplicationStatus, by: Optional[str], note: Optional[str] = None) -> None:
    """Add a timeline entry; the JSON list is reassigned so the change is tracked."""
    entry: Dict[str, Any] = {"status": status.value, "at": utcnow().isoformat(), "by": by}
    if note:
        entry["note"] = note
    application.status_history = [*(application.status_history or []), entry]


class ApplicationService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = ApplicationRepository(db)
        self.users = UserRepository(db)
        self.consents = ConsentService(db)
        self.audit = AuditService(db)

    # -------------------------------------------------------------------------
    # Applicant operations
    # -------------------------------------------------------------------------

    def create(self, caller: Caller, data: ApplicationCreate) -> Application:
        if isinstance(caller, ApplicantSession):
            if data.type == ApplicationType.RENEWAL:
                raise ValidationError("Renewal applications require a student login", field="type")
            fields = {
                "vertical": caller.vertical,
                "applicant_mobile": caller.contact if caller.contact_type == ContactType.PHONE else None,
                "applicant_email": caller.contact if caller.contact_type == ContactType.EMAIL else None,
                "consent_subject": caller.contact,
                "student_user_id": None,
            }
        else:
            if caller.role != UserRole.STUDENT:
                raise AuthorizationError("Only applicants and students can create applications")
            user = self.users.find_by_id(caller.id)
            if user is None:
                raise NotFoundError("User", caller.id)
            fields = {
                "vertical": data.vertical or user.vertical,
                "applicant_mobile": user.mobile,
                "applicant_email": user.email,
                "consent_subject": user.id,
                "student_user_id": user.id,
            }
            if fields["vertical"] is None:
                raise ValidationError("Vertical is required", field="vertical")

        with self.transaction():
            application = Application(
                tracking_number=self._next_tracking_number(),
                type=data.type,
                status=ApplicationStatus.DRAFT,
                applicant_name=data.applicant_name or (data.data or {}).get("fullName"),
                data=dict(data.data or {}),
                status_history=[],
                **fields,
            )
            append_history(application, ApplicationStatus.DRAFT, caller.id, "Application started")
            self.repository.add(application)
            self.audit.log(
                AuditAction.CREATE, "application", application.id, caller,
                new_value={"tracking_number": application.tracking_number, "vertical": application.vertical},
            )
        self._logger.info(f"Application {application.tracking_number} created ({application.vertical.value})")
        return application

    def update(self, caller: Caller, application_id: str, data: ApplicationUpdate) -> Application:
        application = self._get(application_id)
        if not self._owns(caller, application):
            raise AuthorizationError("You can only update your own applications")
        if application.status not in EDITABLE_STATUSES:
            raise AuthorizationError("Cannot update application after review has started")

        with self.transaction():
            if data.applicant_name is not None:
                application.applicant_name = data.applicant_name
            if data.data:
                application.data = {**(application.data or {}), **data.data}
            self.audit.log(
                AuditAction.UPDATE, "application", application.id, caller,
                metadata={"sections": sorted((data.data or {}).keys())},
            )
        return application

    def submit(self, caller: Caller, application_id: str) -> Application:
        application = self._get(application_id)
        if not self._owns(caller, application):
            raise AuthorizationError("You can only submit your own applications")
        if application.status != ApplicationStatus.DRAFT:
            raise BusinessRuleViolation("submit_from_draft", "Only draft applications can be submitted")
        if not application.applicant_name:
            raise ValidationError("Applicant name is required before submission", field="applicantName")

        context = ConsentContext.RENEWAL if application.type == ApplicationType.RENEWAL else ConsentContext.APPLICATION
        check = self.consents.check_required(application.consent_subject, context)
        if not check.satisfied:
            raise BusinessRuleViolation(
                "consent_required",
                "Required consents have not been given",
                details={"missing": [t.value for t in check.missing]},
            )

        with self.transaction():
            application.status = ApplicationStatus.SUBMITTED
            application.submitted_at = utcnow()
            append_history(application, ApplicationStatus.SUBMITTED, caller.id, "Application submitted")
            self.audit.log_status_change(
                "application", application.id, ApplicationStatus.DRAFT, ApplicationStatus.SUBMITTED, caller
            )
        self._logger.info(f"Application {application.tracking_number} submitted")
        return application

    def withdraw(self, caller: Caller, application_id: str) -> Application:
        """Owner-side soft delete of a draft; the record is archived, not removed."""
        application = self._get(application_id)
        if not self._owns(caller, application):
            raise AuthorizationError("You can only withdraw your own applications")
        if application.status != ApplicationStatus.DRAFT:
            raise BusinessRuleViolation(
                "withdraw_from_draft",
                "Cannot delete application after submission. Contact administration for withdrawal.",
                details={"status": application.status.value},
            )

        with self.transaction():
            application.status = ApplicationStatus.ARCHIVED
            append_history(application, ApplicationStatus.ARCHIVED, caller.id, "Withdrawn by applicant")
            self.audit.log(
                AuditAction.DELETE, "application", application.id, caller,
                old_value={"status": ApplicationStatus.DRAFT},
                new_value={"status": ApplicationStatus.ARCHIVED},
                metadata={"tracking_number": application.tracking_number},
            )
        self._logger.info(f"Application {application.tracking_number} withdrawn by its owner")
        return application

    def track(self, tracking_number: str, mobile: str) -> TrackingResponse:
        """Public status lookup; the mobile number must match the application."""
        application = self.repository.find_by_tracking_number(tracking_number.strip())
        normalized = normalize_phone_number(mobile)
        if application is None or not normalized or application.applicant_mobile != normalized:
            raise NotFoundError("Application", message="Application not found or mobile number does not match")

        upcoming = [
            i.scheduled_at for i in application.interviews
            if i.status == InterviewStatus.SCHEDULED and i.scheduled_at >= utcnow()
        ]
        return TrackingResponse(
            tracking_number=application.tracking_number,
            vertical=application.vertical,
            type=application.type,
            status=application.status,
            applicant_name=application.applicant_name,
            submitted_at=application.submitted_at,
            timeline=[{k: v for k, v in entry.items() if k != "by"} for entry in application.status_history or []],
            next_interview=min(upcoming) if upcoming else None,
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, caller: Caller, application_id: str) -> Application:
        application = self._get(application_id)
        self._ensure_can_view(caller, application)
        return application

    def list_applications(
        self,
        caller: Caller,
        page: int = 1,
        limit: int = 20,
        vertical: Optional[Vertical] = None,
        status: Optional[ApplicationStatus] = None,
        type: Optional[ApplicationType] = None,
        search: Optional[str] = None,
    ) -> PageResult[Application]:
        if isinstance(caller, ApplicantSession):
            items = self.repository.find_for_contact(caller.contact)
            return PageResult(items=items, total=len(items), page=1, limit=max(limit, len(items)))

        student_user_id = None
        if caller.role == UserRole.STUDENT:
            student_user_id = caller.id
        else:
            vertical = self.scoped_vertical(caller, vertical)
        query = self.repository.filtered(
            vertical=vertical, status=status, type=type, student_user_id=student_user_id, search=search
        )
        return self.repository.paginate(query, page, limit)

    def stats(self, caller: CurrentUser, vertical: Optional[Vertical] = None) -> ApplicationStats:
        vertical = self.scoped_vertical(caller, vertical)
        counts = self.repository.count_by(Application.status, {"vertical": vertical})
        by_status = {s.value: 0 for s in ApplicationStatus}
        for status, total in counts.items():
            by_status[ApplicationStatus(status).value] = total
        return ApplicationStats(total=sum(by_status.values()), by_status=by_status)

    # -------------------------------------------------------------------------
    # Staff operations
    # -------------------------------------------------------------------------

    def update_status(self, caller: CurrentUser, application_id: str, data: ApplicationStatusUpdate) -> Application:
        application = self._get(application_id)
        self.ensure_vertical_access(caller, application.vertical)

        old_status = application.status
        if data.status not in STATUS_TRANSITIONS.get(old_status, ()):
            raise BusinessRuleViolation(
                "status_transition",
                f"Cannot change status from {old_status.value} to {data.status.value}",
                details={"allowed": [s.value for s in STATUS_TRANSITIONS.get(old_status, ())]},
            )

        now = utcnow()
        with self.transaction():
            application.status = data.status
            if data.status == ApplicationStatus.APPROVED:
                application.approved_at = now
                application.approved_by = caller.id
            elif data.status == ApplicationStatus.REJECTED:
                application.rejected_at = now
                application.rejected_by = caller.id
                application.rejection_reason = data.reason
            if data.notes:
                application.review_notes = data.notes
            append_history(application, data.status, caller.id, data.reason or data.notes)
            self.audit.log_status_change(
                "application", application.id, old_status, data.status, caller,
                metadata={"reason": data.reason} if data.reason else None,
            )
        self._logger.info(
            f"Application {application.tracking_number} moved {old_status.value} -> {data.status.value} by {caller.id}"
        )
        return application

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _get(self, application_id: str) -> Application:
        application = self.repository.find_by_id(application_id)
        if application is None:
            raise NotFoundError("Application", application_id)
        return application

    @staticmethod
    def _owns(caller: Caller, application: Application) -> bool:
        if isinstance(caller, ApplicantSession):
            return application.consent_subject == caller.contact
        return caller.role == UserRole.STUDENT and application.student_user_id == caller.id

    def _ensure_can_view(self, caller: Caller, application: Application) -> None:
        if self._owns(caller, application):
            return
        if isinstance(caller, CurrentUser):
            if caller.role == UserRole.TRUSTEE:
                return
            if caller.role == UserRole.SUPERINTENDENT and caller.vertical == application.vertical:
                return
        raise AuthorizationError("You do not have access to this application")

    def _next_tracking_number(self) -> str:
        prefix = f"{TRACKING_PREFIX}-{utcnow().year}-"
        last = self.repository.last_tracking_number(prefix)
        sequence = int(last.rsplit("-", 1)[1]) + 1 if last else 1
        return f"{prefix}{sequence:05d}"

    def latest_for_student(self, student_id: str) -> Optional[Application]:
        return self.repository.latest_for_student(student_id)
