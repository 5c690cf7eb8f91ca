from hostel_admin.services.common.context import ApplicantSession, CurrentUser
from hostel_admin.services.common.errors import (
    AlreadyExistsError,
    AuthenticationError,
    AuthorizationError,
    BusinessRuleViolation,
    ConflictError,
    NotFoundError,
    RateLimitError,
    ServiceError,
    ValidationError,
)

__all__ = [
    "ApplicantSession",
    "CurrentUser",
    "ServiceError",
    "NotFoundError",
    "AlreadyExistsError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "BusinessRuleViolation",
    "RateLimitError",
]
