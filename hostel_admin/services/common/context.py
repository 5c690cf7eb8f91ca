"""
Caller identities passed from the API layer into services.
"""

from dataclasses import dataclass
from typing import Optional

from hostel_admin.schemas.common.enums import ActorType, ContactType, UserRole, Vertical

@dataclass
class CurrentUser:
    """Authenticated account holder."""

    id: str
    role: UserRole
    vertical: Optional[Vertical] = None
    email: Optional[str] = None
    token_jti: Optional[str] = None
    token_exp: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def actor_type(self) -> ActorType:
        return ActorType.USER


@dataclass
class ApplicantSession:
    """Applicant who proved control of a contact through OTP."""

    verification_id: str
    contact: str
    contact_type: ContactType
    vertical: Vertical
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def id(self) -> str:
        return self.contact

    @property
    def actor_type(self) -> ActorType:
        return ActorType.APPLICANT
