"""
Administrator-maintained configuration: leave types, blackout dates and
notification rules.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import JSON, Boolean, Date, Enum as SQLEnum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hostel_admin.models.base import TimestampModel
from hostel_admin.schemas.common.enums import CommunicationChannel, LeaveType, UserRole

__all__ = ["LeaveTypeConfig", "BlackoutDate", "NotificationRule"]


class LeaveTypeConfig(TimestampModel):
    """Limits applied when students request a given leave type."""

    __tablename__ = "leave_type_configs"

    leave_type: Mapped[LeaveType] = mapped_column(
        SQLEnum(LeaveType, name="leave_type"), unique=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    max_days_per_month: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_days_per_semester: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allowed_verticals: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class BlackoutDate(TimestampModel):
    """Period during which regular leave cannot be taken."""

    __tablename__ = "blackout_dates"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    verticals: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class NotificationRule(TimestampModel):
    """Which message goes to whom when an event happens."""

    __tablename__ = "notification_rules"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    event: Mapped[str] = mapped_column(String(50), nullable=False, index=True, comment="e.g. FEE_DUE, LEAVE_APPROVED")
    channel: Mapped[CommunicationChannel] = mapped_column(
        SQLEnum(CommunicationChannel, name="communication_channel"), nullable=False
    )
    recipient_role: Mapped[UserRole] = mapped_column(SQLEnum(UserRole, name="user_role"), nullable=False)
    template: Mapped[str] = mapped_column(Text, nullable=False)
    offset_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="Days before (-) or after (+) the event")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
