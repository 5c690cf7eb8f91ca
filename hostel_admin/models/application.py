"""
Admission applications and interviews.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_admin.models.base import TimestampModel
from hostel_admin.schemas.common.enums import (
    ApplicationStatus,
    ApplicationType,
    InterviewMode,
    InterviewOutcome,
    InterviewStatus,
    Vertical,
)

__all__ = ["Application", "Interview"]


class Application(TimestampModel):
    """
    Admission or renewal application.

    ``data`` holds the free-form form sections (personal, guardian,
    education, ...) and is merged on update. ``status_history`` is the
    public timeline shown on the tracking page.
    """

    __tablename__ = "applications"
    __table_args__ = (
        Index("idx_applications_vertical_status", "vertical", "status"),
        {"comment": "Hostel admission applications"},
    )

    tracking_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True, comment="HG-YYYY-NNNNN"
    )
    type: Mapped[ApplicationType] = mapped_column(
        SQLEnum(ApplicationType, name="application_type"), nullable=False, default=ApplicationType.NEW
    )
    vertical: Mapped[Vertical] = mapped_column(SQLEnum(Vertical, name="vertical"), nullable=False)
    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, name="application_status"),
        nullable=False,
        default=ApplicationStatus.DRAFT,
        index=True,
    )

    applicant_name: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    applicant_mobile: Mapped[Optional[str]] = mapped_column(String(10), nullable=True, index=True)
    applicant_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    student_user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    consent_subject: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Key under which the applicant's consents are recorded"
    )

    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    status_history: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    approved_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    rejected_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    interviews = relationship(
        "Interview",
        back_populates="application",
        order_by="Interview.scheduled_at",
        cascade="all, delete-orphan",
    )


class Interview(TimestampModel):
    """Interview slot booked for an application."""

    __tablename__ = "interviews"
    __table_args__ = (
        Index("idx_interviews_scheduled_at", "scheduled_at"),
        {"comment": "Applicant interviews"},
    )

    application_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vertical: Mapped[Vertical] = mapped_column(SQLEnum(Vertical, name="vertical"), nullable=False)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    mode: Mapped[InterviewMode] = mapped_column(SQLEnum(InterviewMode, name="interview_mode"), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="Room or meeting link")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[InterviewStatus] = mapped_column(
        SQLEnum(InterviewStatus, name="interview_status"), nullable=False, default=InterviewStatus.SCHEDULED
    )
    outcome: Mapped[Optional[InterviewOutcome]] = mapped_column(
        SQLEnum(InterviewOutcome, name="interview_outcome"), nullable=True
    )
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="0-100")
    scheduled_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    application = relationship("Application", back_populates="interviews")
