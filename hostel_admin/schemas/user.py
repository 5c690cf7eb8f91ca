"""
User profile and administration schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BeforeValidator, EmailStr, Field, field_validator, model_validator

from hostel_admin.schemas.common.base import BaseSchema
from hostel_admin.schemas.common.enums import UserRole, Vertical
from hostel_admin.utils.sms import normalize_phone_number

__all__ = [
    "UserResponse",
    "ProfileUpdate",
    "UserCreate",
    "UserCreatedResponse",
    "UserStatusUpdate",
    "DataExportResponse",
    "ErasureRequest",
    "ErasureResponse",
]


def _mobile(v: Optional[str]) -> Optional[str]:
    if not v:
        return None
    normalized = normalize_phone_number(v)
    if normalized is None:
        raise ValueError("Invalid mobile number. Must be 10 digits starting with 6-9.")
    return normalized


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v.strip() if isinstance(v, str) else v


def _lower_email(v: Optional[str]) -> Optional[str]:
    return v.lower() if v else None


MobileField = Annotated[Optional[str], AfterValidator(_mobile)]
EmailField = Annotated[Optional[EmailStr], BeforeValidator(_blank_to_none), AfterValidator(_lower_email)]


class UserResponse(BaseSchema):
    """Profile without credentials."""

    id: str
    full_name: str
    email: Optional[str] = None
    mobile: Optional[str] = None
    role: UserRole
    vertical: Optional[Vertical] = None
    date_of_birth: Optional[date] = None
    is_active: bool
    first_login: bool
    guardian_of_id: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime


class ProfileUpdate(BaseSchema):
    full_name: Optional[str] = Field(default=None, min_length=2, max_length=150)
    email: EmailField = None
    mobile: MobileField = None
    date_of_birth: Optional[date] = None

    @field_validator("date_of_birth")
    @classmethod
    def not_in_future(cls, v: Optional[date]) -> Optional[date]:
        if v and v > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v


class UserCreate(BaseSchema):
    full_name: str = Field(..., min_length=2, max_length=150)
    email: EmailField = None
    mobile: MobileField = None
    role: UserRole
    vertical: Optional[Vertical] = None
    date_of_birth: Optional[date] = None
    guardian_of_id: Optional[str] = Field(default=None, description="Student id for PARENT accounts")

    @model_validator(mode="after")
    def check_role_fields(self) -> "UserCreate":
        if not self.email and not self.mobile:
            raise ValueError("Email or mobile is required")
        if self.role in (UserRole.STUDENT, UserRole.SUPERINTENDENT) and self.vertical is None:
            raise ValueError(f"Vertical is required for {self.role.value} accounts")
        if self.role == UserRole.PARENT and not self.guardian_of_id:
            raise ValueError("Parent accounts must be linked to a student")
        return self


class UserCreatedResponse(BaseSchema):
    user: UserResponse
    temporary_password: str


class UserStatusUpdate(BaseSchema):
    is_active: bool


class DataExportResponse(BaseSchema):
    """Everything held about one data principal, as stored."""

    exported_at: datetime
    user: Dict[str, Any]
    applications: List[Dict[str, Any]] = Field(default_factory=list)
    allocations: List[Dict[str, Any]] = Field(default_factory=list)
    leaves: List[Dict[str, Any]] = Field(default_factory=list)
    fees: List[Dict[str, Any]] = Field(default_factory=list)
    payments: List[Dict[str, Any]] = Field(default_factory=list)
    consents: List[Dict[str, Any]] = Field(default_factory=list)


class ErasureRequest(BaseSchema):
    reason: str = Field(..., min_length=10, max_length=500)


class ErasureResponse(BaseSchema):
    user_id: str
    anonymized: Dict[str, int]
