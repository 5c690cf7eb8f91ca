"""Audit log data access."""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Query, Session

from hostel_admin.models.audit import AuditLog
from hostel_admin.repositories.base import BaseRepository


class AuditRepository(BaseRepository[AuditLog]):

    def __init__(self, db: Session):
        super().__init__(AuditLog, db)

    def filtered(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        action: Optional[str] = None,
        actor_id: Optional[str] = None,
        success: Optional[bool] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> Query:
        query = self._apply_criteria(
            self.query(),
            {
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "actor_id": actor_id,
                "success": success,
            },
        )
        if date_from:
            query = query.filter(AuditLog.created_at >= date_from)
        if date_to:
            query = query.filter(AuditLog.created_at <= date_to)
        return query.order_by(AuditLog.created_at.desc())
