"""
Standard API response wrappers.
"""

from typing import Generic, Optional, TypeVar

from pydantic import Field

from hostel_admin.schemas.common.base import BaseSchema

T = TypeVar("T")

__all__ = ["SuccessResponse", "ErrorResponse", "MessageResponse"]


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success response."""

    success: bool = Field(default=True, description="Success flag")
    message: Optional[str] = Field(default=None, description="Response message")
    data: Optional[T] = Field(default=None, description="Response data")

    @classmethod
    def create(cls, data: Optional[T] = None, message: Optional[str] = None):
        return cls(success=True, message=message, data=data)


class ErrorResponse(BaseSchema):
    """Standard error response."""

    success: bool = Field(default=False, description="Success flag")
    error: str = Field(..., description="Application error code")
    message: str = Field(..., description="Error message")
    details: Optional[dict] = Field(default=None, description="Structured error details")


class MessageResponse(BaseSchema):
    success: bool = True
    message: str
