"""
Consent schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hostel_admin.schemas.common.base import BaseDBSchema, BaseSchema
from hostel_admin.schemas.common.enums import ConsentContext, ConsentType

__all__ = [
    "ConsentGrant",
    "ConsentRevoke",
    "ConsentVerifyText",
    "ConsentResponse",
    "ConsentCheckResponse",
    "RenewalCheckResponse",
    "BulkConsentCheck",
]


class ConsentGrant(BaseSchema):
    consent_type: ConsentType
    version: str = Field(..., min_length=1, max_length=20)
    consent_text: str = Field(..., min_length=10, description="Exact text shown to the user")


class ConsentRevoke(BaseSchema):
    consent_type: ConsentType
    reason: str = Field(default="User requested revocation", max_length=500)


class ConsentVerifyText(BaseSchema):
    consent_id: str
    consent_text: str


class ConsentResponse(BaseDBSchema):
    subject: str
    consent_type: ConsentType
    version: str
    text_hash: str
    accepted_at: datetime
    expires_at: datetime
    is_current: bool
    revoked_at: Optional[datetime] = None
    revocation_reason: Optional[str] = None


class ConsentCheckResponse(BaseSchema):
    context: ConsentContext
    satisfied: bool
    missing: List[ConsentType]
    granted: List[ConsentType]


class RenewalCheckResponse(BaseSchema):
    consent_type: ConsentType
    needs_renewal: bool
    reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    days_remaining: Optional[int] = None


class BulkConsentCheck(BaseSchema):
    consent_types: List[ConsentType] = Field(..., min_length=1)

