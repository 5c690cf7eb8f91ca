"""
Room and allocation schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from hostel_admin.schemas.common.base import BaseDBSchema, BaseSchema
from hostel_admin.schemas.common.enums import AllocationStatus, RoomStatus, Vertical

__all__ = [
    "RoomCreate",
    "RoomUpdate",
    "RoomResponse",
    "AvailabilityResponse",
    "AllocationCreate",
    "AllocationEnd",
    "AllocationTransfer",
    "AllocationResponse",
]


class RoomCreate(BaseSchema):
    room_number: str = Field(..., min_length=1, max_length=20)
    vertical: Vertical
    floor: int = Field(default=0, ge=0, le=50)
    capacity: int = Field(..., ge=1, le=20)
    amenities: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class RoomUpdate(BaseSchema):
    floor: Optional[int] = Field(default=None, ge=0, le=50)
    capacity: Optional[int] = Field(default=None, ge=1, le=20)
    status: Optional[RoomStatus] = Field(
        default=None, description="Only MAINTENANCE, RESERVED or AVAILABLE may be set manually"
    )
    amenities: Optional[List[str]] = None
    notes: Optional[str] = None


class RoomResponse(BaseDBSchema):
    room_number: str
    vertical: Vertical
    floor: int
    capacity: int
    occupied_count: int
    available_beds: int
    status: RoomStatus
    amenities: List[str]
    notes: Optional[str] = None


class AvailabilityResponse(BaseSchema):
    vertical: Optional[Vertical] = None
    total_rooms: int
    total_beds: int
    occupied_beds: int
    available_beds: int
    occupancy_rate: float
    rooms_by_status: Dict[str, int]


class AllocationCreate(BaseSchema):
    student_id: str
    room_id: str
    bed_label: Optional[str] = Field(default=None, max_length=10)


class AllocationEnd(BaseSchema):
    reason: str = Field(default="Vacated", min_length=3, max_length=500)


class AllocationTransfer(BaseSchema):
    target_room_id: str
    reason: str = Field(..., min_length=3, max_length=500)


class AllocationResponse(BaseDBSchema):
    room_id: str
    room_number: Optional[str] = None
    student_id: str
    student_name: Optional[str] = None
    vertical: Vertical
    status: AllocationStatus
    bed_label: Optional[str] = None
    allocated_at: datetime
    check_in_confirmed: bool
    checked_in_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    end_reason: Optional[str] = None
    transferred_to_id: Optional[str] = None
