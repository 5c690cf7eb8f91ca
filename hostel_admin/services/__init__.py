"""
Service layer. Services own transactions; repositories never commit.
"""

from hostel_admin.services.application_service import ApplicationService
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.auth_service import AuthService
from hostel_admin.services.communication_service import CommunicationService
from hostel_admin.services.config_service import ConfigService
from hostel_admin.services.consent_service import ConsentService
from hostel_admin.services.dashboard_service import DashboardService
from hostel_admin.services.interview_service import InterviewService
from hostel_admin.services.leave_service import LeaveService
from hostel_admin.services.otp_service import OTPService
from hostel_admin.services.payment_service import PaymentService
from hostel_admin.services.renewal_service import RenewalService
from hostel_admin.services.room_service import RoomService
from hostel_admin.services.user_service import UserService

__all__ = [
    "ApplicationService",
    "AuditService",
    "AuthService",
    "CommunicationService",
    "ConfigService",
    "ConsentService",
    "DashboardService",
    "InterviewService",
    "LeaveService",
    "OTPService",
    "PaymentService",
    "RenewalService",
    "RoomService",
    "UserService",
]
