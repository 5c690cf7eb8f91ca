"""
Renewal tracking schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from hostel_admin.schemas.common.base import BaseSchema
from hostel_admin.schemas.common.enums import RenewalStatus, Vertical

__all__ = ["RenewalResponse"]


class RenewalResponse(BaseSchema):
    allocation_id: str
    student_id: str
    student_name: Optional[str] = None
    room_number: Optional[str] = None
    vertical: Vertical
    allocated_at: datetime
    due_date: datetime
    days_remaining: int
    status: RenewalStatus
    renewal_application_id: Optional[str] = None
