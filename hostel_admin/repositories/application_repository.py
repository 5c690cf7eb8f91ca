"""Application and interview data access."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from hostel_admin.models.application import Application, Interview
from hostel_admin.repositories.base import BaseRepository
from hostel_admin.schemas.common.enums import InterviewStatus


class ApplicationRepository(BaseRepository[Application]):

    def __init__(self, db: Session):
        super().__init__(Application, db)

    def find_by_tracking_number(self, tracking_number: str) -> Optional[Application]:
        return self.find_one_by(tracking_number=tracking_number.upper())

    def last_tracking_number(self, prefix: str) -> Optional[str]:
        """Highest tracking number starting with ``prefix``."""
        row = (
            self.db.query(Application.tracking_number)
            .filter(Application.tracking_number.like(f"{prefix}%"))
            .order_by(Application.tracking_number.desc())
            .first()
        )
        return row[0] if row else None

    def filtered(
        self,
        vertical=None,
        status=None,
        type=None,
        student_user_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Query:
        query = self._apply_criteria(
            self.query(),
            {"vertical": vertical, "status": status, "type": type, "student_user_id": student_user_id},
        )
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                Application.applicant_name.ilike(pattern) | Application.tracking_number.ilike(pattern)
            )
        return query.order_by(Application.created_at.desc())

    def find_for_contact(self, contact: str) -> List[Application]:
        return (
            self.query()
            .filter(Application.consent_subject == contact)
            .order_by(Application.created_at.desc())
            .all()
        )

    def latest_for_student(self, student_id: str) -> Optional[Application]:
        return (
            self.query()
            .filter(Application.student_user_id == student_id)
            .order_by(Application.created_at.desc())
            .first()
        )

    def for_data_subject(self, user_id: str, contacts: List[str]) -> List[Application]:
        """Applications owned by the account or filed under one of its contacts."""
        keys = [user_id] + [c for c in contacts if c]
        return (
            self.query()
            .filter(or_(Application.student_user_id == user_id, Application.consent_subject.in_(keys)))
            .order_by(Application.created_at.asc())
            .all()
        )


class InterviewRepository(BaseRepository[Interview]):

    def __init__(self, db: Session):
        super().__init__(Interview, db)

    def between(self, start: datetime, end: datetime, vertical=None, status=None) -> List[Interview]:
        query = self._apply_criteria(self.query(), {"vertical": vertical, "status": status})
        return (
            query.filter(Interview.scheduled_at >= start, Interview.scheduled_at < end)
            .order_by(Interview.scheduled_at)
            .all()
        )

    def active_for_application(self, application_id: str) -> Optional[Interview]:
        return (
            self.query()
            .filter(
                Interview.application_id == application_id,
                Interview.status == InterviewStatus.SCHEDULED,
            )
            .first()
        )
