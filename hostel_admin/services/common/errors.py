"""
Service-layer exceptions.

These exceptions are raised by service methods and are translated into
HTTP responses by the handlers in ``hostel_admin.core.error_handlers``.
"""
from __future__ import annotations

from typing import Any, Optional

from hostel_admin.core.exceptions import ErrorCode


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    status_code: int = 400
    error_code: ErrorCode = ErrorCode.INVALID_REQUEST

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(ServiceError):
    """Raised when a requested resource does not exist."""

    status_code = 404
    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(
        self,
        resource_type: str,
        identifier: str | int | None = None,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        if message is None:
            message = f"{resource_type} not found"
            if identifier is not None:
                message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class AlreadyExistsError(ServiceError):
    """Raised when attempting to create a resource that already exists."""

    status_code = 409
    error_code = ErrorCode.CONFLICT

    def __init__(
        self,
        resource_type: str,
        field: str,
        value: Any,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with {field}='{value}' already exists"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.field = field
        self.value = value


class ValidationError(ServiceError):
    """Raised when business logic validation fails."""

    status_code = 400
    error_code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        if field and details is None:
            details = {"field": field}
        super().__init__(message, details)
        self.field = field


class AuthenticationError(ServiceError):
    """Raised when authentication fails."""

    status_code = 401
    error_code = ErrorCode.AUTHENTICATION_FAILED

    def __init__(self, message: str = "Authentication failed", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, details)


class AuthorizationError(ServiceError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
    error_code = ErrorCode.AUTHORIZATION_FAILED

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        required_permission: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.required_permission = required_permission


class ConflictError(ServiceError):
    """Raised when an operation conflicts with current state."""

    status_code = 409
    error_code = ErrorCode.CONFLICT

    def __init__(
        self,
        message: str,
        conflicting_field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.conflicting_field = conflicting_field


class BusinessRuleViolation(ServiceError):
    """Raised when a business rule is violated."""

    status_code = 422
    error_code = ErrorCode.BUSINESS_RULE_VIOLATION

    def __init__(
        self,
        rule_name: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.rule_name = rule_name


class RateLimitError(ServiceError):
    """Raised when a caller must wait before retrying."""

    status_code = 429
    error_code = ErrorCode.RATE_LIMIT_EXCEEDED

    def __init__(
        self,
        message: str,
        retry_after: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        if retry_after is not None:
            details = {**(details or {}), "retryAfter": retry_after}
        super().__init__(message, details)
        self.retry_after = retry_after
