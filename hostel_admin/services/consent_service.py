"""
DPDP consent ledger.

The consent subject is the user id for account holders and the verified
contact for applicants who have not been given an account yet.
"""

import hashlib
import math
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from hostel_admin.config.settings import settings
from hostel_admin.models.consent import ConsentRecord
from hostel_admin.repositories.consent_repository import ConsentRepository
from hostel_admin.schemas.common.enums import AuditAction, ConsentContext, ConsentType
from hostel_admin.schemas.consent import ConsentCheckResponse, RenewalCheckResponse
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import ApplicantSession, CurrentUser
from hostel_admin.services.common.errors import NotFoundError
from hostel_admin.utils.datetime_utils import add_months, utcnow

Subject = Union[CurrentUser, ApplicantSession]

REQUIRED_CONSENTS: Dict[ConsentContext, List[ConsentType]] = {
    ConsentContext.APPLICATION: [
        ConsentType.TERMS_AND_CONDITIONS,
        ConsentType.PRIVACY_POLICY,
        ConsentType.DATA_PROCESSING,
    ],
    ConsentContext.ADMISSION: [
        ConsentType.TERMS_AND_CONDITIONS,
        ConsentType.PRIVACY_POLICY,
        ConsentType.DATA_PROCESSING,
        ConsentType.HOSTEL_RULES,
    ],
    ConsentContext.RENEWAL: [ConsentType.RENEWAL_TERMS, ConsentType.PRIVACY_POLICY],
    ConsentContext.PARENT_ACCESS: [ConsentType.PARENT_GUARDIAN, ConsentType.PRIVACY_POLICY],
}

RENEWAL_WARNING_DAYS = 30


def hash_consent_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class ConsentService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = ConsentRepository(db)
        self.audit = AuditService(db)

    def record(self, subject: Subject, consent_type: ConsentType, version: str, consent_text: str) -> ConsentRecord:
        """Record acceptance, superseding any earlier record of the same type."""
        now = utcnow()
        with self.transaction():
            previous = self.repository.current(subject.id, consent_type)
            if previous is not None:
                previous.is_current = False
            record = self.repository.add(
                ConsentRecord(
                    subject=subject.id,
                    consent_type=consent_type,
                    version=version,
                    text_hash=hash_consent_text(consent_text),
                    accepted_at=now,
                    expires_at=add_months(now, settings.CONSENT_VALIDITY_MONTHS),
                    is_current=True,
                    ip_address=subject.ip_address,
                    user_agent=(subject.user_agent or "")[:500] or None,
                )
            )
            self.audit.log(
                AuditAction.CONSENT_GRANTED, "consent", record.id, subject,
                new_value={"consent_type": consent_type, "version": version},
                metadata={"superseded": previous.id if previous else None},
            )
        return record

    def revoke(self, subject: Subject, consent_type: ConsentType, reason: str = "User requested revocation") -> ConsentRecord:
        record = self.repository.current(subject.id, consent_type)
        if record is None or record.revoked_at is not None:
            raise NotFoundError("Consent", message=f"No active {consent_type.value} consent to revoke")
        with self.transaction():
            record.revoked_at = utcnow()
            record.revocation_reason = reason
            record.is_current = False
            self.audit.log(
                AuditAction.CONSENT_REVOKED, "consent", record.id, subject,
                old_value={"consent_type": consent_type}, metadata={"reason": reason},
            )
        self._logger.info(f"Consent {consent_type.value} revoked by {subject.actor_type.value.lower()}")
        return record

    def granted_types(self, subject_id: str, types: Iterable[ConsentType]) -> Dict[ConsentType, bool]:
        now = utcnow()
        result = {}
        for consent_type in types:
            record = self.repository.current(subject_id, consent_type)
            result[consent_type] = record is not None and record.is_valid(now)
        return result

    def check_required(self, subject_id: str, context: ConsentContext) -> ConsentCheckResponse:
        status = self.granted_types(subject_id, REQUIRED_CONSENTS[context])
        granted = [t for t, ok in status.items() if ok]
        missing = [t for t, ok in status.items() if not ok]
        return ConsentCheckResponse(context=context, satisfied=not missing, missing=missing, granted=granted)

    def bulk_check(self, subject_id: str, types: Iterable[ConsentType]) -> Dict[str, bool]:
        return {t.value: ok for t, ok in self.granted_types(subject_id, types).items()}

    def history(self, subject_id: str, consent_type: Optional[ConsentType] = None) -> List[ConsentRecord]:
        return self.repository.history(subject_id, consent_type)

    def verify_text(self, subject_id: str, consent_id: str, consent_text: str) -> bool:
        """Whether ``consent_text`` is exactly the text accepted in ``consent_id``."""
        record = self.repository.find_by_id(consent_id)
        if record is None or record.subject != subject_id:
            raise NotFoundError("Consent", consent_id)
        return record.text_hash == hash_consent_text(consent_text)

    def renewal_check(self, subject_id: str, consent_type: ConsentType) -> RenewalCheckResponse:
        record = self.repository.current(subject_id, consent_type)
        if record is None:
            return RenewalCheckResponse(consent_type=consent_type, needs_renewal=True, reason="No consent on record")

        now = utcnow()
        if record.expires_at < now:
            return RenewalCheckResponse(
                consent_type=consent_type,
                needs_renewal=True,
                reason="Consent has expired",
                expires_at=record.expires_at,
                days_remaining=0,
            )

        days = math.floor((record.expires_at - now).total_seconds() / 86400)
        if days <= RENEWAL_WARNING_DAYS:
            return RenewalCheckResponse(
                consent_type=consent_type,
                needs_renewal=True,
                reason=f"Consent expires in {days} days",
                expires_at=record.expires_at,
                days_remaining=days,
            )
        return RenewalCheckResponse(
            consent_type=consent_type, needs_renewal=False, expires_at=record.expires_at, days_remaining=days
        )

    def expiring(self, days: int = RENEWAL_WARNING_DAYS) -> List[ConsentRecord]:
        now = utcnow()
        return self.repository.expiring_between(now, now + timedelta(days=days))
