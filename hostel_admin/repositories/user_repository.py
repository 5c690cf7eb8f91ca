"""User and revoked-token data access."""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from hostel_admin.models.user import RevokedToken, User
from hostel_admin.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self, db: Session):
        super().__init__(User, db)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email.lower())

    def find_by_mobile(self, mobile: str) -> Optional[User]:
        return self.find_one_by(mobile=mobile)

    def find_by_identifier(self, email: Optional[str], mobile: Optional[str]) -> Optional[User]:
        """Match on either login identifier."""
        clauses = []
        if email:
            clauses.append(User.email == email)
        if mobile:
            clauses.append(User.mobile == mobile)
        if not clauses:
            return None
        return self.query().filter(or_(*clauses)).first()

    def find_parents_of(self, student_id: str) -> list:
        return self.query().filter(User.guardian_of_id == student_id, User.is_active.is_(True)).all()

    def filtered(self, role=None, vertical=None, is_active=None, search: Optional[str] = None) -> Query:
        query = self._apply_criteria(self.query(), {"role": role, "vertical": vertical, "is_active": is_active})
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(User.full_name.ilike(pattern), User.email.ilike(pattern), User.mobile.ilike(pattern))
            )
        return query.order_by(User.created_at.desc())


class RevokedTokenRepository(BaseRepository[RevokedToken]):

    def __init__(self, db: Session):
        super().__init__(RevokedToken, db)

    def is_revoked(self, jti: str) -> bool:
        return self.query().filter(RevokedToken.jti == jti).first() is not None

    def purge_expired(self, now: datetime) -> int:
        return self.query().filter(RevokedToken.expires_at < now).delete(synchronize_session=False)
