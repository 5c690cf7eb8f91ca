"""
Audit trail.
"""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, Enum as SQLEnum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hostel_admin.models.base import TimestampModel
from hostel_admin.schemas.common.enums import ActorType

__all__ = ["AuditLog"]


class AuditLog(TimestampModel):
    """Append-only record of a security or business event."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_actor", "actor_id"),
        {"comment": "Audit trail"},
    )

    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    actor_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    actor_type: Mapped[ActorType] = mapped_column(
        SQLEnum(ActorType, name="actor_type"), nullable=False, default=ActorType.SYSTEM
    )
    old_value: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    new_value: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    extra: Mapped[Optional[Dict[str, Any]]] = mapped_column("metadata", JSON, nullable=True)
