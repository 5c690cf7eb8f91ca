"""
OTP request/response schemas.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator, model_validator

from hostel_admin.schemas.common.base import BaseSchema
from hostel_admin.schemas.common.enums import ContactType, Vertical
from hostel_admin.utils.sms import normalize_phone_number
from hostel_admin.utils.validators import normalize_email

__all__ = [
    "OTPSendRequest",
    "OTPSendResponse",
    "OTPVerifyRequest",
    "OTPVerifyResponse",
    "OTPResendRequest",
    "OTPResendResponse",
    "OTPStatusResponse",
]


class OTPSendRequest(BaseSchema):
    """Request a code for a phone number or an email address."""

    phone: Optional[str] = Field(default=None, description="Indian mobile number")
    email: Optional[str] = Field(default=None, description="Email address")
    vertical: Vertical = Field(..., description="Vertical the applicant is applying to")

    @field_validator("vertical", mode="before")
    @classmethod
    def upper_vertical(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        normalized = normalize_phone_number(v)
        if normalized is None:
            raise ValueError("Invalid phone number. Must be 10 digits starting with 6-9.")
        return normalized

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        normalized = normalize_email(v)
        if normalized is None:
            raise ValueError("Invalid email address.")
        return normalized

    @model_validator(mode="after")
    def require_contact(self) -> "OTPSendRequest":
        if not self.phone and not self.email:
            raise ValueError("Phone number or email is required.")
        return self

    @property
    def contact(self) -> str:
        return self.phone or self.email

    @property
    def contact_type(self) -> ContactType:
        return ContactType.PHONE if self.phone else ContactType.EMAIL


class OTPSendResponse(BaseSchema):
    token: str = Field(..., description="Verification handle to send back with the code")
    expires_in: int = Field(..., description="Seconds until the code expires")
    resend_available_in: int = Field(..., description="Seconds until a resend is accepted")
    message: str
    dev_otp: Optional[str] = Field(default=None, alias="devOTP", description="Only in development")


class OTPVerifyRequest(BaseSchema):
    token: str = Field(..., min_length=1)
    otp: str = Field(..., description="Six digit code")


class OTPVerifyResponse(BaseSchema):
    verified: bool = True
    session_token: str
    redirect_url: str
    contact: str
    contact_type: ContactType
    vertical: Vertical
    message: str = "OTP verified successfully"


class OTPResendRequest(BaseSchema):
    token: str = Field(..., min_length=1)
    reason: str = Field(default="user_request", max_length=50)


class OTPResendResponse(BaseSchema):
    message: str
    expires_in: int
    resend_available_in: int
    resend_count: int
    dev_otp: Optional[str] = Field(default=None, alias="devOTP")


class OTPStatusResponse(BaseSchema):
    token: str
    contact: str
    expires_in: int
    resend_available_in: int
    attempts_remaining: int
    verified: bool
    active: bool
