"""Communication log data access."""

from sqlalchemy.orm import Query, Session

from hostel_admin.models.communication import CommunicationLog
from hostel_admin.repositories.base import BaseRepository


class CommunicationRepository(BaseRepository[CommunicationLog]):

    def __init__(self, db: Session):
        super().__init__(CommunicationLog, db)

    def filtered(self, channel=None, status=None, context=None, escalated=None) -> Query:
        query = self._apply_criteria(
            self.query(),
            {"channel": channel, "status": status, "context": context, "escalated": escalated},
        )
        return query.order_by(CommunicationLog.created_at.desc())
