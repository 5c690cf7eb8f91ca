"""ORM models; importing this package registers every table."""

from hostel_admin.models.base import BaseModel, TimestampModel
from hostel_admin.models.user import RevokedToken, User
from hostel_admin.models.otp import OTPVerification
from hostel_admin.models.application import Application, Interview
from hostel_admin.models.room import Room, RoomAllocation
from hostel_admin.models.leave import LeaveRequest
from hostel_admin.models.fee import Fee, Payment
from hostel_admin.models.consent import ConsentRecord
from hostel_admin.models.audit import AuditLog
from hostel_admin.models.communication import CommunicationLog
from hostel_admin.models.config import BlackoutDate, LeaveTypeConfig, NotificationRule

__all__ = [
    "BaseModel",
    "TimestampModel",
    "User",
    "RevokedToken",
    "OTPVerification",
    "Application",
    "Interview",
    "Room",
    "RoomAllocation",
    "LeaveRequest",
    "Fee",
    "Payment",
    "ConsentRecord",
    "AuditLog",
    "CommunicationLog",
    "LeaveTypeConfig",
    "BlackoutDate",
    "NotificationRule",
]
