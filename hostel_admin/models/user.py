"""
User accounts and revoked tokens.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Enum as SQLEnum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_admin.models.base import BaseModel, TimestampModel
from hostel_admin.schemas.common.enums import UserRole, Vertical

__all__ = ["User", "RevokedToken"]


class User(TimestampModel):
    """
    Account for students, staff and parents.

    Staff and students belong to a vertical; trustees and accounts staff
    may have none. Parents point at the student they follow through
    ``guardian_of_id``.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_role_vertical", "role", "vertical"),
        {"comment": "Application user accounts"},
    )

    full_name: Mapped[str] = mapped_column(String(150), nullable=False, comment="Display name")
    email: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, nullable=True, index=True, comment="Login email (lower case)"
    )
    mobile: Mapped[Optional[str]] = mapped_column(
        String(10), unique=True, nullable=True, index=True, comment="Ten digit Indian mobile"
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, comment="bcrypt hash")
    role: Mapped[UserRole] = mapped_column(SQLEnum(UserRole, name="user_role"), nullable=False)
    vertical: Mapped[Optional[Vertical]] = mapped_column(
        SQLEnum(Vertical, name="vertical"), nullable=True, comment="Vertical for students and superintendents"
    )
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    first_login: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, comment="Password must be changed on next login"
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    guardian_of_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        comment="Student followed by a PARENT account",
    )

    ward = relationship("User", remote_side="User.id", uselist=False)


class RevokedToken(BaseModel):
    """Token ids invalidated by logout."""

    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="Original token expiry")
    revoked_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
