"""
DPDP consent records.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hostel_admin.models.base import TimestampModel
from hostel_admin.schemas.common.enums import ConsentType

__all__ = ["ConsentRecord"]


class ConsentRecord(TimestampModel):
    """
    A data principal's acceptance of one consent text.

    ``subject`` is a user id for account holders or the verified contact
    for applicants who have no account yet. Accepting the same type again
    supersedes the earlier record (``is_current`` false).
    """

    __tablename__ = "consent_records"
    __table_args__ = (
        Index("idx_consents_subject_type", "subject", "consent_type"),
        {"comment": "DPDP consent ledger"},
    )

    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    consent_type: Mapped[ConsentType] = mapped_column(SQLEnum(ConsentType, name="consent_type"), nullable=False)
    version: Mapped[str] = mapped_column(String(20), nullable=False)
    text_hash: Mapped[str] = mapped_column(String(64), nullable=False, comment="SHA-256 of consent text")
    accepted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    revocation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def is_valid(self, now: datetime) -> bool:
        return self.is_current and self.revoked_at is None and self.expires_at > now
