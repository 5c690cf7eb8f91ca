"""
Interview scheduling for submitted applications.
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional

import pytz
from sqlalchemy.orm import Session

from hostel_admin.config.settings import settings
from hostel_admin.models.application import Application, Interview
from hostel_admin.repositories.application_repository import ApplicationRepository, InterviewRepository
from hostel_admin.schemas.application import (
    InterviewComplete,
    InterviewReschedule,
    InterviewSchedule,
    InterviewSlot,
)
from hostel_admin.schemas.common.enums import (
    ApplicationStatus,
    AuditAction,
    InterviewStatus,
    Vertical,
)
from hostel_admin.services.application_service import append_history
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import (
    BusinessRuleViolation,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from hostel_admin.utils.datetime_utils import to_naive_utc, utcnow

SCHEDULABLE_STATUSES = (ApplicationStatus.SUBMITTED, ApplicationStatus.UNDER_REVIEW)

# hourly slot start times, local hostel time; the last slot ends at 17:00
SLOT_HOURS = range(10, 17)


class InterviewService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = InterviewRepository(db)
        self.applications = ApplicationRepository(db)
        self.audit = AuditService(db)

    def schedule(self, caller: CurrentUser, data: InterviewSchedule) -> Interview:
        application = self.applications.find_by_id(data.application_id)
        if application is None:
            raise NotFoundError("Application", data.application_id)
        self.ensure_vertical_access(caller, application.vertical)

        if application.status not in SCHEDULABLE_STATUSES:
            raise BusinessRuleViolation(
                "interview_status", "Cannot schedule interview for this application status"
            )
        if self.repository.active_for_application(application.id) is not None:
            raise ConflictError("Application already has a scheduled interview")

        scheduled_at = self._future(data.scheduled_at)
        self._ensure_slot_free(application.vertical, scheduled_at, data.duration_minutes)

        with self.transaction():
            interview = self.repository.add(
                Interview(
                    application_id=application.id,
                    vertical=application.vertical,
                    scheduled_at=scheduled_at,
                    duration_minutes=data.duration_minutes,
                    mode=data.mode,
                    location=data.location,
                    notes=data.notes,
                    status=InterviewStatus.SCHEDULED,
                    scheduled_by=caller.id,
                )
            )
            old_status = application.status
            application.status = ApplicationStatus.INTERVIEW_SCHEDULED
            append_history(application, ApplicationStatus.INTERVIEW_SCHEDULED, caller.id, "Interview scheduled")
            self.audit.log(
                AuditAction.CREATE, "interview", interview.id, caller,
                new_value={"scheduled_at": scheduled_at, "mode": data.mode},
            )
            self.audit.log_status_change(
                "application", application.id, old_status, ApplicationStatus.INTERVIEW_SCHEDULED, caller
            )
        return interview

    def reschedule(self, caller: CurrentUser, interview_id: str, data: InterviewReschedule) -> Interview:
        interview = self._get_scheduled(caller, interview_id)
        scheduled_at = self._future(data.scheduled_at)
        self._ensure_slot_free(interview.vertical, scheduled_at, interview.duration_minutes, exclude_id=interview.id)

        with self.transaction():
            old = interview.scheduled_at
            interview.scheduled_at = scheduled_at
            if data.location is not None:
                interview.location = data.location
            if data.notes is not None:
                interview.notes = data.notes
            self.audit.log(
                AuditAction.UPDATE, "interview", interview.id, caller,
                old_value={"scheduled_at": old}, new_value={"scheduled_at": scheduled_at},
            )
        return interview

    def cancel(self, caller: CurrentUser, interview_id: str, reason: str) -> Interview:
        interview = self._get_scheduled(caller, interview_id)
        with self.transaction():
            interview.status = InterviewStatus.CANCELLED
            interview.notes = self._append(interview.notes, f"Cancelled: {reason}")
            application = interview.application
            if application.status == ApplicationStatus.INTERVIEW_SCHEDULED:
                application.status = ApplicationStatus.UNDER_REVIEW
                append_history(application, ApplicationStatus.UNDER_REVIEW, caller.id, "Interview cancelled")
            self.audit.log_status_change(
                "interview", interview.id, InterviewStatus.SCHEDULED, InterviewStatus.CANCELLED, caller,
                metadata={"reason": reason},
            )
        return interview

    def complete(self, caller: CurrentUser, interview_id: str, data: InterviewComplete) -> Interview:
        """Record the outcome; the application returns to review for the final decision."""
        interview = self._get_scheduled(caller, interview_id)
        with self.transaction():
            interview.status = InterviewStatus.COMPLETED
            interview.outcome = data.outcome
            interview.score = data.score
            interview.completed_at = utcnow()
            interview.completed_by = caller.id
            if data.notes:
                interview.notes = self._append(interview.notes, data.notes)
            application: Application = interview.application
            if application.status == ApplicationStatus.INTERVIEW_SCHEDULED:
                application.status = ApplicationStatus.UNDER_REVIEW
                append_history(
                    application, ApplicationStatus.UNDER_REVIEW, caller.id,
                    f"Interview completed: {data.outcome.value}",
                )
            self.audit.log_status_change(
                "interview", interview.id, InterviewStatus.SCHEDULED, InterviewStatus.COMPLETED, caller,
                metadata={"outcome": data.outcome, "score": data.score},
            )
        return interview

    def get(self, caller: CurrentUser, interview_id: str) -> Interview:
        interview = self.repository.find_by_id(interview_id)
        if interview is None:
            raise NotFoundError("Interview", interview_id)
        self.ensure_vertical_access(caller, interview.vertical)
        return interview

    def list_interviews(
        self,
        caller: CurrentUser,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        status: Optional[InterviewStatus] = None,
        vertical: Optional[Vertical] = None,
    ) -> List[Interview]:
        vertical = self.scoped_vertical(caller, vertical)
        start = self._local_midnight_utc(date_from) if date_from else datetime.min
        end = self._local_midnight_utc(date_to + timedelta(days=1)) if date_to else datetime.max
        return self.repository.between(start, end, vertical=vertical, status=status)

    def slots(self, caller: CurrentUser, day: date, vertical: Optional[Vertical] = None) -> List[InterviewSlot]:
        """Hourly slots of ``day`` in hostel time with booked markers."""
        vertical = self.scoped_vertical(caller, vertical)
        tz = pytz.timezone(settings.TIMEZONE)
        booked = self.repository.between(
            self._local_midnight_utc(day),
            self._local_midnight_utc(day + timedelta(days=1)),
            vertical=vertical,
            status=InterviewStatus.SCHEDULED,
        )

        slots = []
        for hour in SLOT_HOURS:
            local_start = tz.localize(datetime.combine(day, time(hour)))
            start = to_naive_utc(local_start)
            end = start + timedelta(hours=1)
            taken = next((i for i in booked if start <= i.scheduled_at < end), None)
            slots.append(
                InterviewSlot(
                    starts_at=local_start,
                    available=taken is None,
                    interview_id=taken.id if taken else None,
                )
            )
        return slots

    # helpers

    def _get_scheduled(self, caller: CurrentUser, interview_id: str) -> Interview:
        interview = self.get(caller, interview_id)
        if interview.status != InterviewStatus.SCHEDULED:
            raise BusinessRuleViolation(
                "interview_status", f"Interview is already {interview.status.value.lower()}"
            )
        return interview

    @staticmethod
    def _future(value: datetime) -> datetime:
        if value.tzinfo is None:
            # naive input is hostel local time
            value = pytz.timezone(settings.TIMEZONE).localize(value)
        value = to_naive_utc(value)
        if value <= utcnow():
            raise ValidationError("Interview must be scheduled in the future", field="scheduledAt")
        return value

    def _ensure_slot_free(
        self, vertical: Vertical, start: datetime, duration_minutes: int, exclude_id: Optional[str] = None
    ) -> None:
        end = start + timedelta(minutes=duration_minutes)
        nearby = self.repository.between(
            start - timedelta(hours=4), end, vertical=vertical, status=InterviewStatus.SCHEDULED
        )
        for other in nearby:
            if other.id == exclude_id:
                continue
            other_end = other.scheduled_at + timedelta(minutes=other.duration_minutes)
            if other.scheduled_at < end and start < other_end:
                raise ConflictError("This interview slot is already booked")

    @staticmethod
    def _local_midnight_utc(day: date) -> datetime:
        tz = pytz.timezone(settings.TIMEZONE)
        return to_naive_utc(tz.localize(datetime.combine(day, time.min)))

    @staticmethod
    def _append(existing: Optional[str], note: str) -> str:
        return f"{existing}\n{note}" if existing else note
