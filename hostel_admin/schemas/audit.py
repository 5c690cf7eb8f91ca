"""
Audit log schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from hostel_admin.schemas.common.base import BaseSchema
from hostel_admin.schemas.common.enums import ActorType

__all__ = ["AuditLogResponse", "AuditLogFilter"]


class AuditLogResponse(BaseSchema):
    id: str
    entity_type: str
    entity_id: Optional[str] = None
    action: str
    actor_id: Optional[str] = None
    actor_type: ActorType
    old_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    success: bool
    error_message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="extra")
    created_at: datetime


class AuditLogFilter(BaseSchema):
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    action: Optional[str] = None
    actor_id: Optional[str] = None
    success: Optional[bool] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
