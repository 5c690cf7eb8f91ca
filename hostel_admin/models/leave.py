"""
Student leave requests.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Enum as SQLEnum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_admin.models.base import TimestampModel
from hostel_admin.schemas.common.enums import LeaveStatus, LeaveType, Vertical

__all__ = ["LeaveRequest"]


class LeaveRequest(TimestampModel):
    """Leave of absence requested by a student."""

    __tablename__ = "leave_requests"
    __table_args__ = (
        Index("idx_leaves_student_status", "student_id", "status"),
        Index("idx_leaves_vertical_status", "vertical", "status"),
        {"comment": "Student leave requests"},
    )

    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    vertical: Mapped[Vertical] = mapped_column(SQLEnum(Vertical, name="vertical"), nullable=False)
    leave_type: Mapped[LeaveType] = mapped_column(SQLEnum(LeaveType, name="leave_type"), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_during_leave: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    status: Mapped[LeaveStatus] = mapped_column(
        SQLEnum(LeaveStatus, name="leave_status"), nullable=False, default=LeaveStatus.PENDING
    )
    applied_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    approved_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    rejected_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    parent_notified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    parent_notified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    checked_out_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    returned_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Append-only movement notes")

    student = relationship("User")

    @property
    def student_name(self) -> Optional[str]:
        return self.student.full_name if self.student is not None else None

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def append_note(self, note: str) -> None:
        self.notes = f"{self.notes}\n{note}" if self.notes else note
