"""
Leave request schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import Field, model_validator

from hostel_admin.schemas.common.base import BaseDBSchema, BaseSchema
from hostel_admin.schemas.common.enums import LeaveStatus, LeaveType, Vertical

__all__ = [
    "LeaveCreate",
    "LeaveDecision",
    "LeaveReject",
    "LeaveMovement",
    "LeaveCancel",
    "LeaveResponse",
    "LeaveStats",
]


class LeaveCreate(BaseSchema):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=10, max_length=500)
    destination: Optional[str] = Field(default=None, max_length=255)
    contact_during_leave: Optional[str] = Field(default=None, max_length=20)

    @model_validator(mode="after")
    def check_range(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class LeaveDecision(BaseSchema):
    notes: Optional[str] = Field(default=None, max_length=500)


class LeaveReject(BaseSchema):
    reason: str = Field(..., min_length=3, max_length=500)


class LeaveMovement(BaseSchema):
    notes: Optional[str] = Field(default=None, max_length=500)


class LeaveCancel(BaseSchema):
    reason: Optional[str] = Field(default=None, max_length=500)


class LeaveResponse(BaseDBSchema):
    student_id: str
    student_name: Optional[str] = None
    vertical: Vertical
    leave_type: LeaveType
    start_date: date
    end_date: date
    days: int
    reason: str
    destination: Optional[str] = None
    contact_during_leave: Optional[str] = None
    status: LeaveStatus
    applied_at: datetime
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    parent_notified: bool
    parent_notified_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None
    returned_at: Optional[datetime] = None
    notes: Optional[str] = None


class LeaveStats(BaseSchema):
    pending: int
    approved: int
    checked_out: int
    returned: int
    total_this_month: int
