"""Consent record data access."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_admin.models.consent import ConsentRecord
from hostel_admin.repositories.base import BaseRepository


class ConsentRepository(BaseRepository[ConsentRecord]):

    def __init__(self, db: Session):
        super().__init__(ConsentRecord, db)

    def current(self, subject: str, consent_type) -> Optional[ConsentRecord]:
        return (
            self.query()
            .filter(
                ConsentRecord.subject == subject,
                ConsentRecord.consent_type == consent_type,
                ConsentRecord.is_current.is_(True),
            )
            .order_by(ConsentRecord.accepted_at.desc())
            .first()
        )

    def history(self, subject: str, consent_type=None) -> List[ConsentRecord]:
        return self.find_by_criteria(
            {"subject": subject, "consent_type": consent_type},
            order_by=[ConsentRecord.accepted_at.desc()],
        )

    def expiring_between(self, start: datetime, end: datetime) -> List[ConsentRecord]:
        return (
            self.query()
            .filter(
                ConsentRecord.is_current.is_(True),
                ConsentRecord.revoked_at.is_(None),
                ConsentRecord.expires_at > start,
                ConsentRecord.expires_at <= end,
            )
            .order_by(ConsentRecord.expires_at.asc())
            .all()
        )
