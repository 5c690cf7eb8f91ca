"""
Infrastructure-level exceptions.

Business-rule failures raised by services live in
``hostel_admin.services.common.errors``; the classes here cover tokens,
persistence and outbound integrations.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"

    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    DATABASE_ERROR = "DATABASE_ERROR"
    SMS_SERVICE_ERROR = "SMS_SERVICE_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Carries the HTTP status the API layer should answer with.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the error envelope"""
        body: Dict[str, Any] = {
            "success": False,
            "error": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            body["details"] = self.details
        return body

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


class TokenError(BaseAppException):
    """Base class for token problems"""

    def __init__(
        self,
        message: str = "Invalid or expired authentication token",
        error_code: ErrorCode = ErrorCode.TOKEN_INVALID,
    ):
        super().__init__(message, error_code, status_code=401)


class TokenExpiredError(TokenError):
    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, ErrorCode.TOKEN_EXPIRED)


class InvalidTokenError(TokenError):
    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, ErrorCode.TOKEN_INVALID)


class RepositoryError(BaseAppException):
    """Raised when a persistence operation fails"""

    def __init__(self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DATABASE_ERROR, details, 500)


class SMSServiceError(BaseAppException):
    """Raised when an SMS provider cannot be configured or reached"""

    def __init__(self, message: str = "SMS service unavailable", provider: Optional[str] = None):
        details = {"provider": provider} if provider else {}
        super().__init__(message, ErrorCode.SMS_SERVICE_ERROR, details, 502)
