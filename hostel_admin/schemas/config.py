"""
Configuration schemas: leave types, blackout dates, notification rules.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field, model_validator

from hostel_admin.schemas.common.base import BaseDBSchema, BaseSchema
from hostel_admin.schemas.common.enums import CommunicationChannel, LeaveType, UserRole, Vertical

__all__ = [
    "LeaveTypeConfigCreate",
    "LeaveTypeConfigUpdate",
    "LeaveTypeConfigResponse",
    "BlackoutDateCreate",
    "BlackoutDateUpdate",
    "BlackoutDateResponse",
    "NotificationRuleCreate",
    "NotificationRuleUpdate",
    "NotificationRuleResponse",
]

ALL_VERTICALS = [v for v in Vertical]


class LeaveTypeConfigCreate(BaseSchema):
    leave_type: LeaveType
    name: str = Field(..., min_length=2, max_length=100)
    max_days_per_month: Optional[int] = Field(default=None, ge=1, le=31)
    max_days_per_semester: Optional[int] = Field(default=None, ge=1, le=183)
    requires_approval: bool = True
    allowed_verticals: List[Vertical] = Field(default_factory=lambda: list(ALL_VERTICALS))
    active: bool = True


class LeaveTypeConfigUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    max_days_per_month: Optional[int] = Field(default=None, ge=1, le=31)
    max_days_per_semester: Optional[int] = Field(default=None, ge=1, le=183)
    requires_approval: Optional[bool] = None
    allowed_verticals: Optional[List[Vertical]] = None
    active: Optional[bool] = None


class LeaveTypeConfigResponse(BaseDBSchema):
    leave_type: LeaveType
    name: str
    max_days_per_month: Optional[int] = None
    max_days_per_semester: Optional[int] = None
    requires_approval: bool
    allowed_verticals: List[Vertical]
    active: bool


class BlackoutDateCreate(BaseSchema):
    name: str = Field(..., min_length=2, max_length=100)
    start_date: date
    end_date: date
    verticals: List[Vertical] = Field(default_factory=lambda: list(ALL_VERTICALS))
    reason: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_range(self) -> "BlackoutDateCreate":
        if self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class BlackoutDateUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    verticals: Optional[List[Vertical]] = None
    reason: Optional[str] = Field(default=None, max_length=500)


class BlackoutDateResponse(BaseDBSchema):
    name: str
    start_date: date
    end_date: date
    verticals: List[Vertical]
    reason: Optional[str] = None


class NotificationRuleCreate(BaseSchema):
    name: str = Field(..., min_length=2, max_length=100)
    event: str = Field(..., min_length=2, max_length=50, pattern=r"^[A-Z][A-Z_]*$")
    channel: CommunicationChannel
    recipient_role: UserRole
    template: str = Field(..., min_length=5, max_length=2000)
    offset_days: int = Field(default=0, ge=-90, le=90)
    active: bool = True


class NotificationRuleUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    channel: Optional[CommunicationChannel] = None
    recipient_role: Optional[UserRole] = None
    template: Optional[str] = Field(default=None, min_length=5, max_length=2000)
    offset_days: Optional[int] = Field(default=None, ge=-90, le=90)
    active: Optional[bool] = None


class NotificationRuleResponse(BaseDBSchema):
    name: str
    event: str
    channel: CommunicationChannel
    recipient_role: UserRole
    template: str
    offset_days: int
    active: bool
