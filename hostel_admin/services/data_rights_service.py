"""
Data principal rights under the DPDP Act: access (export) and erasure.

Erasure anonymises the account instead of deleting it, so fee, leave and
audit records keep a valid owner while no longer identifying the person.
"""

import secrets
from typing import Dict, List

from sqlalchemy.orm import Session

from hostel_admin.core.security import get_password_hasher
from hostel_admin.models.user import User
from hostel_admin.repositories.application_repository import ApplicationRepository
from hostel_admin.repositories.consent_repository import ConsentRepository
from hostel_admin.repositories.fee_repository import FeeRepository, PaymentRepository
from hostel_admin.repositories.leave_repository import LeaveRepository
from hostel_admin.repositories.room_repository import AllocationRepository
from hostel_admin.repositories.user_repository import UserRepository
from hostel_admin.schemas.common.enums import AuditAction, UserRole
from hostel_admin.schemas.user import DataExportResponse, ErasureResponse
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import (
    AuthorizationError,
    BusinessRuleViolation,
    NotFoundError,
)
from hostel_admin.utils.datetime_utils import utcnow

ERASED_NAME = "DELETED USER"
ERASURE_REVOCATION_REASON = "Data erasure request"


class DataRightsService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.users = UserRepository(db)
        self.applications = ApplicationRepository(db)
        self.allocations = AllocationRepository(db)
        self.leaves = LeaveRepository(db)
        self.fees = FeeRepository(db)
        self.payments = PaymentRepository(db)
        self.consents = ConsentRepository(db)
        self.audit = AuditService(db)

    def export(self, caller: CurrentUser, user_id: str) -> DataExportResponse:
        """
        Collect every record held about ``user_id``.

        Account holders may export their own data; trustees may export
        anyone's. Each export is audited.
        """
        if caller.id != user_id and caller.role != UserRole.TRUSTEE:
            raise AuthorizationError("You can only export your own data")
        user = self._get_user(user_id)

        consents = []
        for key in self._subject_keys(user):
            consents.extend(self.consents.history(key))

        export = DataExportResponse(
            exported_at=utcnow(),
            user=user.to_dict(exclude=["password_hash"]),
            applications=[a.to_dict() for a in self.applications.for_data_subject(user.id, self._contacts(user))],
            allocations=[a.to_dict() for a in self.allocations.list_allocations(student_id=user.id)],
            leaves=[leave.to_dict() for leave in self.leaves.filtered(student_id=user.id).all()],
            fees=[f.to_dict() for f in self.fees.for_student(user.id)],
            payments=[p.to_dict() for p in self.payments.filtered(student_id=user.id).all()],
            consents=[c.to_dict() for c in consents],
        )

        with self.transaction():
            self.audit.log(
                AuditAction.DATA_EXPORT, "user", user.id, caller,
                metadata={
                    "sections": ["user", "applications", "allocations", "leaves", "fees", "payments", "consents"]
                },
            )
        self._logger.info(f"Data export for user {user.id} by {caller.id}")
        return export

    def erase(self, caller: CurrentUser, user_id: str, reason: str) -> ErasureResponse:
        """
        Anonymise a data principal on request.

        Personal fields on the account and its applications are cleared,
        active consents are revoked and the account is deactivated.
        """
        user = self._get_user(user_id)
        if user.id == caller.id:
            raise BusinessRuleViolation("self_erasure", "You cannot erase your own account")
        if user.full_name == ERASED_NAME and not user.is_active and user.mobile is None:
            raise BusinessRuleViolation("already_erased", "User data has already been erased")
        if self.allocations.active_for_student(user.id) is not None:
            raise BusinessRuleViolation(
                "active_allocation", "Vacate the student's room before erasing their data"
            )

        self._logger.warning(f"Erasing personal data of user {user.id}", extra={"reason": reason})
        contacts = self._contacts(user)
        counts: Dict[str, int] = {"users": 1, "applications": 0, "consents": 0}
        now = utcnow()

        with self.transaction():
            for application in self.applications.for_data_subject(user.id, contacts):
                application.applicant_name = ERASED_NAME
                application.applicant_mobile = None
                application.applicant_email = None
                application.data = {}
                counts["applications"] += 1

            for key in self._subject_keys(user):
                for record in self.consents.history(key):
                    if record.is_current and record.revoked_at is None:
                        record.revoked_at = now
                        record.revocation_reason = ERASURE_REVOCATION_REASON
                        record.is_current = False
                        counts["consents"] += 1

            user.full_name = ERASED_NAME
            user.email = f"deleted-{user.id[:8]}@deleted.local"
            user.mobile = None
            user.date_of_birth = None
            user.is_active = False
            user.password_hash = get_password_hasher().hash(secrets.token_urlsafe(24))

            self.audit.log(
                AuditAction.DATA_DELETE, "user", user.id, caller,
                metadata={"type": "DPDP_DELETION_REQUEST", "reason": reason, "anonymized": counts},
            )

        self._logger.info(f"Personal data of user {user.id} erased", extra={"anonymized": counts})
        return ErasureResponse(user_id=user.id, anonymized=counts)

    # helpers

    def _get_user(self, user_id: str) -> User:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    @staticmethod
    def _contacts(user: User) -> List[str]:
        return [c for c in (user.mobile, user.email) if c]

    def _subject_keys(self, user: User) -> List[str]:
        return [user.id] + self._contacts(user)
