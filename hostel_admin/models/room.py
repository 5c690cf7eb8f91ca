"""
Rooms and student room allocations.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_admin.models.base import TimestampModel
from hostel_admin.schemas.common.enums import AllocationStatus, RoomStatus, Vertical

__all__ = ["Room", "RoomAllocation"]


class Room(TimestampModel):
    """
    Physical room within a vertical.

    ``occupied_count`` always equals the number of ACTIVE allocations and
    never exceeds ``capacity``.
    """

    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("vertical", "room_number", name="uq_rooms_vertical_number"),
        {"comment": "Rooms per vertical"},
    )

    room_number: Mapped[str] = mapped_column(String(20), nullable=False)
    vertical: Mapped[Vertical] = mapped_column(SQLEnum(Vertical, name="vertical"), nullable=False, index=True)
    floor: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    occupied_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[RoomStatus] = mapped_column(
        SQLEnum(RoomStatus, name="room_status"), nullable=False, default=RoomStatus.AVAILABLE
    )
    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    allocations = relationship("RoomAllocation", back_populates="room")

    @property
    def available_beds(self) -> int:
        return max(0, self.capacity - self.occupied_count)

    def refresh_status(self, keep_manual: bool = True) -> None:
        """
        Derive status from occupancy.

        A manually set MAINTENANCE or RESERVED status is kept unless
        ``keep_manual`` is False, which is the case whenever a bed is taken
        or freed.
        """
        if keep_manual and self.status in (RoomStatus.MAINTENANCE, RoomStatus.RESERVED):
            return
        if self.occupied_count <= 0:
            self.status = RoomStatus.AVAILABLE
        elif self.occupied_count >= self.capacity:
            self.status = RoomStatus.OCCUPIED
        else:
            self.status = RoomStatus.PARTIALLY_OCCUPIED


class RoomAllocation(TimestampModel):
    """Association of a student to a bed in a room."""

    __tablename__ = "room_allocations"
    __table_args__ = (
        Index("idx_allocations_student_status", "student_id", "status"),
        {"comment": "Student room allocations"},
    )

    room_id: Mapped[str] = mapped_column(String(36), ForeignKey("rooms.id"), nullable=False, index=True)
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    vertical: Mapped[Vertical] = mapped_column(SQLEnum(Vertical, name="vertical"), nullable=False)
    status: Mapped[AllocationStatus] = mapped_column(
        SQLEnum(AllocationStatus, name="allocation_status"), nullable=False, default=AllocationStatus.ACTIVE
    )
    bed_label: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    allocated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    allocated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    check_in_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    checked_in_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    ended_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    end_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    transferred_to_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("room_allocations.id"), nullable=True
    )

    room = relationship("Room", back_populates="allocations")
    student = relationship("User")

    @property
    def room_number(self) -> Optional[str]:
        return self.room.room_number if self.room is not None else None

    @property
    def student_name(self) -> Optional[str]:
        return self.student.full_name if self.student is not None else None
