"""
Audit trail service.

Writes are best-effort: a failure to record an audit entry is logged and
never propagates into the business operation being audited.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic_core import to_jsonable_python
from sqlalchemy.orm import Session

from hostel_admin.config.settings import settings
from hostel_admin.models.audit import AuditLog
from hostel_admin.repositories.audit_repository import AuditRepository
from hostel_admin.repositories.base import PageResult
from hostel_admin.schemas.common.enums import ActorType, AuditAction, ContactType
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import ApplicantSession, CurrentUser

Actor = Union[CurrentUser, ApplicantSession, None]


class AuditService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = AuditRepository(db)

    def log(
        self,
        action: Union[AuditAction, str],
        entity_type: str,
        entity_id: Optional[str] = None,
        actor: Actor = None,
        *,
        actor_id: Optional[str] = None,
        actor_type: Optional[ActorType] = None,
        old_value: Optional[Dict[str, Any]] = None,
        new_value: Optional[Dict[str, Any]] = None,
        success: bool = True,
        error_message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """
        Stage an audit entry in the caller's transaction.

        The row is written inside a savepoint so a failing insert leaves the
        surrounding transaction usable. Returns ``None`` when auditing is
        disabled or the write failed.
        """
        if not settings.AUDIT_ENABLED:
            return None

        if actor is not None:
            actor_id = actor_id or actor.id
            actor_type = actor_type or actor.actor_type
            ip_address = ip_address or actor.ip_address
            user_agent = user_agent or actor.user_agent

        entry = AuditLog(
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            action=action.value if isinstance(action, AuditAction) else str(action),
            actor_id=actor_id,
            actor_type=actor_type or ActorType.SYSTEM,
            old_value=self._jsonable(old_value),
            new_value=self._jsonable(new_value),
            success=success,
            error_message=error_message,
            extra=self._jsonable(metadata),
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
        )
        try:
            with self.db.begin_nested():
                self.db.add(entry)
        except Exception as e:
            self._logger.error(
                f"Failed to write audit entry {entry.action} for {entity_type}/{entity_id}: {e}",
                exc_info=True,
            )
            return None
        return entry

    def record(self, *args: Any, **kwargs: Any) -> Optional[AuditLog]:
        """Log and commit immediately, for failure paths that roll back the main work."""
        entry = self.log(*args, **kwargs)
        if entry is not None:
            try:
                self.db.commit()
            except Exception as e:
                self._rollback()
                self._logger.error(f"Failed to commit audit entry: {e}", exc_info=True)
                return None
        return entry

    # helpers

    def log_otp(
        self,
        action: AuditAction,
        verification_id: Optional[str],
        contact: str,
        contact_type: ContactType,
        success: bool = True,
        error_message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        commit: bool = False,
    ) -> Optional[AuditLog]:
        write = self.record if commit else self.log
        return write(
            action,
            "otp_verification",
            verification_id,
            actor_id=contact,
            actor_type=ActorType.APPLICANT,
            success=success,
            error_message=error_message,
            metadata={"contact_type": contact_type.value, **(metadata or {})},
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def log_login(self, user_id: str, ip_address: Optional[str] = None, user_agent: Optional[str] = None):
        return self.log(
            AuditAction.LOGIN,
            "user",
            user_id,
            actor_id=user_id,
            actor_type=ActorType.USER,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def log_login_failed(
        self,
        identifier: str,
        reason: str,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ):
        return self.record(
            AuditAction.LOGIN_FAILED,
            "user",
            user_id,
            actor_id=user_id or identifier,
            actor_type=ActorType.USER if user_id else ActorType.SYSTEM,
            success=False,
            error_message=reason,
            metadata={"identifier": identifier},
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def log_logout(self, user: CurrentUser):
        return self.log(AuditAction.LOGOUT, "user", user.id, user)

    def log_status_change(
        self,
        entity_type: str,
        entity_id: str,
        old_status: Any,
        new_status: Any,
        actor: Actor = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        return self.log(
            AuditAction.STATUS_CHANGE,
            entity_type,
            entity_id,
            actor,
            old_value={"status": old_status},
            new_value={"status": new_status},
            metadata=metadata,
        )

    # queries

    def list_logs(
        self,
        page: int = 1,
        limit: int = 20,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        action: Optional[str] = None,
        actor_id: Optional[str] = None,
        success: Optional[bool] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> PageResult[AuditLog]:
        query = self.repository.filtered(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action.upper() if action else None,
            actor_id=actor_id,
            success=success,
            date_from=date_from,
            date_to=date_to,
        )
        return self.repository.paginate(query, page, limit)

    def entity_trail(self, entity_type: str, entity_id: str) -> List[AuditLog]:
        """Full history of one entity, oldest first."""
        return list(reversed(self.repository.filtered(entity_type=entity_type, entity_id=entity_id).all()))

    @staticmethod
    def _jsonable(value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if value is None:
            return None
        return to_jsonable_python(value)
