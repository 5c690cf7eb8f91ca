"""
Authentication schemas.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import Field, field_validator

from hostel_admin.schemas.common.base import BaseSchema
from hostel_admin.schemas.user import UserResponse

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "RefreshRequest",
    "AccessTokenResponse",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "ForgotPasswordResponse",
    "ResetPasswordRequest",
    "validate_password_strength",
]


def validate_password_strength(password: str) -> str:
    """At least 8 characters with one letter and one digit."""
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not re.search(r"[A-Za-z]", password) or not re.search(r"\d", password):
        raise ValueError("Password must contain at least one letter and one digit")
    return password


class LoginRequest(BaseSchema):
    identifier: str = Field(..., min_length=3, description="Email address or mobile number")
    password: str = Field(..., min_length=1, max_length=72)


class TokenResponse(BaseSchema):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    first_login: bool
    user: UserResponse


class RefreshRequest(BaseSchema):
    refresh_token: str


class AccessTokenResponse(BaseSchema):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class ChangePasswordRequest(BaseSchema):
    current_password: Optional[str] = Field(default=None, max_length=72)
    new_password: str = Field(..., max_length=72)

    @field_validator("new_password")
    @classmethod
    def check_strength(cls, v: str) -> str:
        return validate_password_strength(v)


class ForgotPasswordRequest(BaseSchema):
    contact: str = Field(..., min_length=3, description="Registered email address or mobile number")


class ForgotPasswordResponse(BaseSchema):
    token: str = Field(..., description="Reset handle to send back with the code")
    expires_in: int
    message: str
    dev_otp: Optional[str] = Field(default=None, alias="devOTP", description="Only in development")


class ResetPasswordRequest(BaseSchema):
    token: str = Field(..., min_length=1)
    otp: str = Field(..., description="Six digit code")
    new_password: str = Field(..., max_length=72)

    @field_validator("new_password")
    @classmethod
    def check_strength(cls, v: str) -> str:
        return validate_password_strength(v)
