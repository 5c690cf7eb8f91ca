"""
Enumerations shared by models, schemas and services.
"""

from enum import Enum

__all__ = [
    "Vertical",
    "UserRole",
    "ContactType",
    "ApplicationType",
    "ApplicationStatus",
    "InterviewMode",
    "InterviewStatus",
    "InterviewOutcome",
    "RoomStatus",
    "AllocationStatus",
    "LeaveType",
    "LeaveStatus",
    "FeeType",
    "PaymentStatus",
    "PaymentMethod",
    "ConsentType",
    "ConsentContext",
    "AuditAction",
    "ActorType",
    "CommunicationChannel",
    "CommunicationStatus",
    "CommunicationContext",
    "RenewalStatus",
]


class Vertical(str, Enum):
    """Hostel program tracks."""

    BOYS = "BOYS"
    GIRLS = "GIRLS"
    DHARAMSHALA = "DHARAMSHALA"


class UserRole(str, Enum):
    STUDENT = "STUDENT"
    SUPERINTENDENT = "SUPERINTENDENT"
    TRUSTEE = "TRUSTEE"
    ACCOUNTS = "ACCOUNTS"
    PARENT = "PARENT"


class ContactType(str, Enum):
    PHONE = "phone"
    EMAIL = "email"


class ApplicationType(str, Enum):
    NEW = "NEW"
    RENEWAL = "RENEWAL"


class ApplicationStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ARCHIVED = "ARCHIVED"


class InterviewMode(str, Enum):
    IN_PERSON = "IN_PERSON"
    VIDEO_CALL = "VIDEO_CALL"


class InterviewStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class InterviewOutcome(str, Enum):
    RECOMMENDED = "RECOMMENDED"
    NOT_RECOMMENDED = "NOT_RECOMMENDED"
    NO_SHOW = "NO_SHOW"


class RoomStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    PARTIALLY_OCCUPIED = "PARTIALLY_OCCUPIED"
    MAINTENANCE = "MAINTENANCE"
    RESERVED = "RESERVED"


class AllocationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ENDED = "ENDED"
    TRANSFERRED = "TRANSFERRED"


class LeaveType(str, Enum):
    REGULAR = "REGULAR"
    EMERGENCY = "EMERGENCY"
    MEDICAL = "MEDICAL"
    VACATION = "VACATION"


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    CHECKED_OUT = "CHECKED_OUT"
    RETURNED = "RETURNED"


class FeeType(str, Enum):
    HOSTEL_FEE = "HOSTEL_FEE"
    PROCESSING_FEE = "PROCESSING_FEE"
    SECURITY_DEPOSIT = "SECURITY_DEPOSIT"
    KEY_DEPOSIT = "KEY_DEPOSIT"
    MESS_FEE = "MESS_FEE"
    ELECTRICITY = "ELECTRICITY"
    LAUNDRY = "LAUNDRY"
    OTHER = "OTHER"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    OVERDUE = "OVERDUE"
    WAIVED = "WAIVED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    UPI = "UPI"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHEQUE = "CHEQUE"
    ONLINE = "ONLINE"


class ConsentType(str, Enum):
    TERMS_AND_CONDITIONS = "TERMS_AND_CONDITIONS"
    PRIVACY_POLICY = "PRIVACY_POLICY"
    DATA_PROCESSING = "DATA_PROCESSING"
    HOSTEL_RULES = "HOSTEL_RULES"
    RENEWAL_TERMS = "RENEWAL_TERMS"
    PARENT_GUARDIAN = "PARENT_GUARDIAN"


class ConsentContext(str, Enum):
    """Workflow steps that need a set of consents in place."""

    APPLICATION = "APPLICATION"
    ADMISSION = "ADMISSION"
    RENEWAL = "RENEWAL"
    PARENT_ACCESS = "PARENT_ACCESS"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    STATUS_CHANGE = "STATUS_CHANGE"
    OTP_SEND = "OTP_SEND"
    OTP_VERIFY = "OTP_VERIFY"
    OTP_RESEND = "OTP_RESEND"
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    TOKEN_REFRESH = "TOKEN_REFRESH"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"
    PASSWORD_RESET_REQUEST = "PASSWORD_RESET_REQUEST"
    PASSWORD_RESET = "PASSWORD_RESET"
    DATA_EXPORT = "DATA_EXPORT"
    DATA_DELETE = "DATA_DELETE"
    CONSENT_GRANTED = "CONSENT_GRANTED"
    CONSENT_REVOKED = "CONSENT_REVOKED"
    ALLOCATE = "ALLOCATE"
    VACATE = "VACATE"
    TRANSFER = "TRANSFER"
    PAYMENT = "PAYMENT"


class ActorType(str, Enum):
    USER = "USER"
    APPLICANT = "APPLICANT"
    SYSTEM = "SYSTEM"


class CommunicationChannel(str, Enum):
    SMS = "SMS"
    WHATSAPP = "WHATSAPP"
    EMAIL = "EMAIL"


class CommunicationStatus(str, Enum):
    SENT = "SENT"
    PENDING = "PENDING"
    FAILED = "FAILED"
    SCHEDULED = "SCHEDULED"
    DELIVERED = "DELIVERED"
    READ = "READ"


class CommunicationContext(str, Enum):
    FEE = "FEE"
    INTERVIEW = "INTERVIEW"
    LEAVE = "LEAVE"
    RENEWAL = "RENEWAL"
    GENERAL = "GENERAL"


class RenewalStatus(str, Enum):
    OVERDUE = "OVERDUE"
    DUE_SOON = "DUE_SOON"
    UPCOMING = "UPCOMING"
    NOT_DUE = "NOT_DUE"
