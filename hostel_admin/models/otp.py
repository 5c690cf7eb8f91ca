"""
OTP verification records backing the send/verify/resend flow.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_admin.models.base import TimestampModel
from hostel_admin.schemas.common.enums import ContactType, Vertical

__all__ = ["OTPVerification"]


class OTPVerification(TimestampModel):
    """
    One OTP challenge for a phone number or email address.

    Only a keyed hash of the code is stored. A record stays ``is_active``
    until it is verified or replaced by a fresh send for the same contact.
    """

    __tablename__ = "otp_verifications"
    __table_args__ = (
        Index("idx_otp_contact_active", "contact", "is_active"),
        {"comment": "OTP challenges for applicant contact verification"},
    )

    contact: Mapped[str] = mapped_column(String(255), nullable=False, comment="Normalised phone or email")
    contact_type: Mapped[ContactType] = mapped_column(SQLEnum(ContactType, name="contact_type"), nullable=False)
    vertical: Mapped[Optional[Vertical]] = mapped_column(
        SQLEnum(Vertical, name="vertical"), nullable=True, comment="Null for accounts without a vertical"
    )
    purpose: Mapped[str] = mapped_column(String(50), nullable=False, default="application")

    code_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    resend_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    last_sent_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.max_attempts - self.attempts)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
