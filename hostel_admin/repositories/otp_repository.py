"""OTP verification data access."""

from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_admin.models.otp import OTPVerification
from hostel_admin.repositories.base import BaseRepository


class OTPRepository(BaseRepository[OTPVerification]):

    def __init__(self, db: Session):
        super().__init__(OTPVerification, db)

    def find_active_for_contact(self, contact: str, purpose: str) -> List[OTPVerification]:
        return (
            self.query()
            .filter(
                OTPVerification.contact == contact,
                OTPVerification.purpose == purpose,
                OTPVerification.is_active.is_(True),
            )
            .order_by(OTPVerification.last_sent_at.desc())
            .all()
        )

    def latest_active_for_contact(self, contact: str, purpose: str) -> Optional[OTPVerification]:
        active = self.find_active_for_contact(contact, purpose)
        return active[0] if active else None
