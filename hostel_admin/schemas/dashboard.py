"""
Role dashboard schemas.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from hostel_admin.schemas.application import ApplicationSummary
from hostel_admin.schemas.common.base import BaseSchema
from hostel_admin.schemas.leave import LeaveResponse, LeaveStats
from hostel_admin.schemas.payment import FeeSummary
from hostel_admin.schemas.renewal import RenewalResponse
from hostel_admin.schemas.room import AllocationResponse, AvailabilityResponse
from hostel_admin.schemas.user import UserResponse

__all__ = [
    "StudentDashboard",
    "SuperintendentDashboard",
    "TrusteeDashboard",
    "AccountsDashboard",
    "ParentDashboard",
]


class StudentDashboard(BaseSchema):
    profile: UserResponse
    application: Optional[ApplicationSummary] = None
    allocation: Optional[AllocationResponse] = None
    renewal: Optional[RenewalResponse] = None
    fees: FeeSummary
    recent_leaves: List[LeaveResponse]


class SuperintendentDashboard(BaseSchema):
    vertical: str
    applications_by_status: Dict[str, int]
    pending_leaves: List[LeaveResponse]
    leave_stats: LeaveStats
    occupancy: AvailabilityResponse
    renewals_due: int


class TrusteeDashboard(BaseSchema):
    applications_by_status: Dict[str, int]
    applications_by_vertical: Dict[str, int]
    occupancy: List[AvailabilityResponse]
    leave_stats: LeaveStats
    fees_collected: float
    fees_outstanding: float


class AccountsDashboard(BaseSchema):
    total_billed: float
    total_collected: float
    total_outstanding: float
    overdue_count: int
    unverified_payments: int
    fees_by_status: Dict[str, int]


class ParentDashboard(BaseSchema):
    student: UserResponse
    allocation: Optional[AllocationResponse] = None
    fees: FeeSummary
    recent_leaves: List[LeaveResponse]
