"""Room and allocation data access."""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hostel_admin.models.room import Room, RoomAllocation
from hostel_admin.repositories.base import BaseRepository
from hostel_admin.schemas.common.enums import AllocationStatus, RoomStatus


class RoomRepository(BaseRepository[Room]):

    def __init__(self, db: Session):
        super().__init__(Room, db)

    def find_by_number(self, vertical, room_number: str) -> Optional[Room]:
        return self.find_one_by(vertical=vertical, room_number=room_number)

    def get_for_update(self, room_id: str) -> Optional[Room]:
        """Row-locked fetch; SQLite ignores the lock."""
        return self.query().filter(Room.id == room_id).with_for_update().first()

    def list_rooms(self, vertical=None, status=None, floor=None, available_only: bool = False) -> List[Room]:
        query = self._apply_criteria(self.query(), {"vertical": vertical, "status": status, "floor": floor})
        if available_only:
            query = query.filter(
                Room.occupied_count < Room.capacity,
                Room.status.notin_([RoomStatus.MAINTENANCE, RoomStatus.RESERVED]),
            )
        return query.order_by(Room.floor, Room.room_number).all()

    def capacity_totals(self, vertical=None):
        """(rooms, beds, occupied beds) across the selection."""
        query = self.db.query(
            func.count(Room.id),
            func.coalesce(func.sum(Room.capacity), 0),
            func.coalesce(func.sum(Room.occupied_count), 0),
        )
        if vertical is not None:
            query = query.filter(Room.vertical == vertical)
        return query.one()


class AllocationRepository(BaseRepository[RoomAllocation]):

    def __init__(self, db: Session):
        super().__init__(RoomAllocation, db)

    def active_for_student(self, student_id: str) -> Optional[RoomAllocation]:
        return self.find_one_by(student_id=student_id, status=AllocationStatus.ACTIVE)

    def active(self, vertical=None) -> List[RoomAllocation]:
        return self.find_by_criteria(
            {"status": AllocationStatus.ACTIVE, "vertical": vertical},
            order_by=[RoomAllocation.allocated_at],
        )

    def list_allocations(self, status=None, vertical=None, room_id=None, student_id=None) -> List[RoomAllocation]:
        return self.find_by_criteria(
            {"status": status, "vertical": vertical, "room_id": room_id, "student_id": student_id},
            order_by=[RoomAllocation.allocated_at.desc()],
        )
