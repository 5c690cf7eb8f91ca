"""
User account management.
"""

import secrets
import string
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from hostel_admin.core.security import get_password_hasher
from hostel_admin.models.user import User
from hostel_admin.repositories.base import PageResult
from hostel_admin.repositories.user_repository import UserRepository
from hostel_admin.schemas.common.enums import AuditAction, UserRole, Vertical
from hostel_admin.schemas.user import ProfileUpdate, UserCreate
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import (
    AlreadyExistsError,
    BusinessRuleViolation,
    NotFoundError,
    ValidationError,
)

PROFILE_FIELDS = ("full_name", "email", "mobile", "date_of_birth")


def generate_temporary_password(length: int = 12) -> str:
    """Random password containing at least one letter and one digit."""
    alphabet = string.ascii_letters + string.digits
    while True:
        candidate = "".join(secrets.choice(alphabet) for _ in range(length))
        if any(c.isalpha() for c in candidate) and any(c.isdigit() for c in candidate):
            return candidate


class UserService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = UserRepository(db)
        self.audit = AuditService(db)

    def get_user(self, user_id: str) -> User:
        user = self.repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def get_profile(self, current: CurrentUser) -> User:
        return self.get_user(current.id)

    def update_profile(self, current: CurrentUser, data: ProfileUpdate) -> User:
        user = self.get_user(current.id)
        changes = data.model_dump(exclude_unset=True, include=set(PROFILE_FIELDS))
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return user

        self._ensure_unique(changes.get("email"), changes.get("mobile"), exclude_id=user.id)
        old = {k: getattr(user, k) for k in changes}
        with self.transaction():
            for key, value in changes.items():
                setattr(user, key, value)
            self.audit.log(AuditAction.UPDATE, "user", user.id, current, old_value=old, new_value=changes)
        return user

    def list_users(
        self,
        current: CurrentUser,
        page: int = 1,
        limit: int = 20,
        role: Optional[UserRole] = None,
        vertical: Optional[Vertical] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> PageResult[User]:
        vertical = self.scoped_vertical(current, vertical)
        query = self.repository.filtered(role=role, vertical=vertical, is_active=is_active, search=search)
        return self.repository.paginate(query, page, limit)

    def create_user(self, current: CurrentUser, data: UserCreate) -> Tuple[User, str]:
        """Create an account with a temporary password the holder must change on first login."""
        self._ensure_unique(data.email, data.mobile)

        vertical = data.vertical
        if data.role == UserRole.PARENT:
            ward = self.repository.find_by_id(data.guardian_of_id)
            if ward is None or ward.role != UserRole.STUDENT:
                raise ValidationError("Linked student does not exist", field="guardianOfId")
            vertical = ward.vertical

        temporary_password = generate_temporary_password()
        with self.transaction():
            user = self.repository.add(
                User(
                    full_name=data.full_name,
                    email=data.email,
                    mobile=data.mobile,
                    role=data.role,
                    vertical=vertical,
                    date_of_birth=data.date_of_birth,
                    guardian_of_id=data.guardian_of_id if data.role == UserRole.PARENT else None,
                    password_hash=get_password_hasher().hash(temporary_password),
                    is_active=True,
                    first_login=True,
                )
            )
            self.audit.log(
                AuditAction.CREATE, "user", user.id, current,
                new_value={"role": user.role, "vertical": user.vertical, "email": user.email},
            )
        self._logger.info(f"User {user.id} created with role {user.role.value} by {current.id}")
        return user, temporary_password

    def set_status(self, current: CurrentUser, user_id: str, is_active: bool) -> User:
        user = self.get_user(user_id)
        if user.id == current.id and not is_active:
            raise BusinessRuleViolation("self_deactivation", "You cannot deactivate your own account")
        if user.is_active == is_active:
            return user
        with self.transaction():
            self.audit.log_status_change("user", user.id, user.is_active, is_active, current)
            user.is_active = is_active
        return user

    def _ensure_unique(self, email: Optional[str], mobile: Optional[str], exclude_id: Optional[str] = None) -> None:
        if email:
            existing = self.repository.find_by_email(email)
            if existing is not None and existing.id != exclude_id:
                raise AlreadyExistsError("User", "email", email)
        if mobile:
            existing = self.repository.find_by_mobile(mobile)
            if existing is not None and existing.id != exclude_id:
                raise AlreadyExistsError("User", "mobile", mobile)
