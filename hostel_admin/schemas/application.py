"""
Application and interview schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from hostel_admin.schemas.common.base import BaseDBSchema, BaseSchema
from hostel_admin.schemas.common.enums import (
    ApplicationStatus,
    ApplicationType,
    InterviewMode,
    InterviewOutcome,
    InterviewStatus,
    Vertical,
)

__all__ = [
    "ApplicationCreate",
    "ApplicationUpdate",
    "ApplicationStatusUpdate",
    "ApplicationResponse",
    "ApplicationSummary",
    "TrackingResponse",
    "ApplicationStats",
    "InterviewSchedule",
    "InterviewReschedule",
    "InterviewComplete",
    "InterviewCancel",
    "InterviewResponse",
    "InterviewSlot",
]


class ApplicationCreate(BaseSchema):
    """
    Start an application.

    Applicants authenticated by an OTP session inherit vertical and contact
    from the session token; the body values are used for logged-in users.
    """

    type: ApplicationType = ApplicationType.NEW
    vertical: Optional[Vertical] = None
    applicant_name: Optional[str] = Field(default=None, max_length=150)
    data: Dict[str, Any] = Field(default_factory=dict, description="Form sections")


class ApplicationUpdate(BaseSchema):
    applicant_name: Optional[str] = Field(default=None, max_length=150)
    data: Optional[Dict[str, Any]] = Field(default=None, description="Merged into existing form data")


class ApplicationStatusUpdate(BaseSchema):
    status: ApplicationStatus
    reason: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def rejection_needs_reason(self) -> "ApplicationStatusUpdate":
        if self.status == ApplicationStatus.REJECTED and not (self.reason and self.reason.strip()):
            raise ValueError("A reason is required when rejecting an application")
        return self


class InterviewResponse(BaseDBSchema):
    application_id: str
    vertical: Vertical
    scheduled_at: datetime
    duration_minutes: int
    mode: InterviewMode
    location: Optional[str] = None
    notes: Optional[str] = None
    status: InterviewStatus
    outcome: Optional[InterviewOutcome] = None
    score: Optional[int] = None
    completed_at: Optional[datetime] = None


class ApplicationSummary(BaseDBSchema):
    tracking_number: str
    type: ApplicationType
    vertical: Vertical
    status: ApplicationStatus
    applicant_name: Optional[str] = None
    applicant_mobile: Optional[str] = None
    submitted_at: Optional[datetime] = None


class ApplicationResponse(ApplicationSummary):
    applicant_email: Optional[str] = None
    student_user_id: Optional[str] = None
    data: Dict[str, Any]
    status_history: List[Dict[str, Any]]
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    review_notes: Optional[str] = None
    interviews: List[InterviewResponse] = Field(default_factory=list)


class TrackingResponse(BaseSchema):
    tracking_number: str
    vertical: Vertical
    type: ApplicationType
    status: ApplicationStatus
    applicant_name: Optional[str] = None
    submitted_at: Optional[datetime] = None
    timeline: List[Dict[str, Any]]
    next_interview: Optional[datetime] = None


class ApplicationStats(BaseSchema):
    total: int
    by_status: Dict[str, int]


class InterviewSchedule(BaseSchema):
    application_id: str
    scheduled_at: datetime
    mode: InterviewMode = InterviewMode.IN_PERSON
    duration_minutes: int = Field(default=30, ge=10, le=180)
    location: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def video_needs_link(self) -> "InterviewSchedule":
        if self.mode == InterviewMode.VIDEO_CALL and not self.location:
            raise ValueError("A meeting link is required for video interviews")
        return self


class InterviewReschedule(BaseSchema):
    scheduled_at: datetime
    location: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=2000)


class InterviewComplete(BaseSchema):
    outcome: InterviewOutcome
    score: Optional[int] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = Field(default=None, max_length=2000)


class InterviewCancel(BaseSchema):
    reason: str = Field(..., min_length=3, max_length=500)


class InterviewSlot(BaseSchema):
    starts_at: datetime
    available: bool
    interview_id: Optional[str] = None
