"""
Rooms and bed allocations.

Occupancy counters on ``Room`` move together with allocation rows in the
same transaction, under a row lock on the room.
"""

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from hostel_admin.models.room import Room, RoomAllocation
from hostel_admin.models.user import User
from hostel_admin.repositories.room_repository import AllocationRepository, RoomRepository
from hostel_admin.repositories.user_repository import UserRepository
from hostel_admin.schemas.common.enums import (
    AllocationStatus,
    AuditAction,
    RoomStatus,
    UserRole,
    Vertical,
)
from hostel_admin.schemas.room import (
    AllocationCreate,
    AvailabilityResponse,
    RoomCreate,
    RoomUpdate,
)
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import (
    AlreadyExistsError,
    AuthorizationError,
    BusinessRuleViolation,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from hostel_admin.utils.datetime_utils import utcnow

MANUAL_STATUSES = (RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE, RoomStatus.RESERVED)


class RoomService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.rooms = RoomRepository(db)
        self.allocations = AllocationRepository(db)
        self.users = UserRepository(db)
        self.audit = AuditService(db)

    # -------------------------------------------------------------------------
    # Rooms
    # -------------------------------------------------------------------------

    def create_room(self, caller: CurrentUser, data: RoomCreate) -> Room:
        self.ensure_vertical_access(caller, data.vertical)
        room_number = data.room_number.strip().upper()
        if self.rooms.find_by_number(data.vertical, room_number) is not None:
            raise AlreadyExistsError("Room", "room_number", room_number)

        with self.transaction():
            room = self.rooms.add(
                Room(
                    room_number=room_number,
                    vertical=data.vertical,
                    floor=data.floor,
                    capacity=data.capacity,
                    occupied_count=0,
                    status=RoomStatus.AVAILABLE,
                    amenities=list(data.amenities),
                    notes=data.notes,
                )
            )
            self.audit.log(
                AuditAction.CREATE, "room", room.id, caller,
                new_value={"room_number": room_number, "vertical": data.vertical, "capacity": data.capacity},
            )
        return room

    def update_room(self, caller: CurrentUser, room_id: str, data: RoomUpdate) -> Room:
        room = self.get_room(caller, room_id)
        changes = data.model_dump(exclude_unset=True)

        capacity = changes.get("capacity")
        if capacity is not None and capacity < room.occupied_count:
            raise BusinessRuleViolation(
                "capacity_below_occupancy",
                f"Capacity cannot be less than current occupancy ({room.occupied_count})",
            )
        status = changes.get("status")
        if status is not None and status not in MANUAL_STATUSES:
            raise ValidationError(
                "Room status can only be set to AVAILABLE, MAINTENANCE or RESERVED", field="status"
            )

        old = {"capacity": room.capacity, "status": room.status}
        with self.transaction():
            for key in ("floor", "capacity"):
                if changes.get(key) is not None:
                    setattr(room, key, changes[key])
            if "notes" in changes:
                room.notes = changes["notes"]
            if changes.get("amenities") is not None:
                room.amenities = list(changes["amenities"])
            if status is not None:
                room.status = status
            room.refresh_status()
            self.audit.log(
                AuditAction.UPDATE, "room", room.id, caller,
                old_value=old, new_value={"capacity": room.capacity, "status": room.status},
            )
        return room

    def get_room(self, caller: CurrentUser, room_id: str) -> Room:
        room = self.rooms.find_by_id(room_id)
        if room is None:
            raise NotFoundError("Room", room_id)
        self.ensure_vertical_access(caller, room.vertical)
        return room

    def list_rooms(
        self,
        caller: CurrentUser,
        vertical: Optional[Vertical] = None,
        status: Optional[RoomStatus] = None,
        floor: Optional[int] = None,
        available_only: bool = False,
    ) -> List[Room]:
        vertical = self.scoped_vertical(caller, vertical)
        return self.rooms.list_rooms(vertical=vertical, status=status, floor=floor, available_only=available_only)

    def availability(self, caller: Optional[CurrentUser] = None, vertical: Optional[Vertical] = None) -> AvailabilityResponse:
        if caller is not None:
            vertical = self.scoped_vertical(caller, vertical)
        total_rooms, total_beds, occupied = self.rooms.capacity_totals(vertical)
        by_status: Dict[str, int] = {s.value: 0 for s in RoomStatus}
        for status, count in self.rooms.count_by(Room.status, {"vertical": vertical}).items():
            by_status[RoomStatus(status).value] = count
        total_beds, occupied = int(total_beds), int(occupied)
        return AvailabilityResponse(
            vertical=vertical,
            total_rooms=total_rooms,
            total_beds=total_beds,
            occupied_beds=occupied,
            available_beds=max(0, total_beds - occupied),
            occupancy_rate=round(occupied / total_beds * 100, 2) if total_beds else 0.0,
            rooms_by_status=by_status,
        )

    # -------------------------------------------------------------------------
    # Allocations
    # -------------------------------------------------------------------------

    def allocate(self, caller: CurrentUser, data: AllocationCreate) -> RoomAllocation:
        student = self._get_student(data.student_id)
        room = self._lock_room(data.room_id)
        self.ensure_vertical_access(caller, room.vertical)
        if student.vertical != room.vertical:
            raise BusinessRuleViolation("vertical_mismatch", "Student and room belong to different verticals")
        self._ensure_can_take(room)
        if self.allocations.active_for_student(student.id) is not None:
            raise ConflictError("Student already has an active room allocation")

        with self.transaction():
            allocation = self._occupy(room, student, caller, data.bed_label)
            self.audit.log(
                AuditAction.ALLOCATE, "allocation", allocation.id, caller,
                new_value={"room_id": room.id, "student_id": student.id, "room_number": room.room_number},
            )
        self._logger.info(f"Student {student.id} allocated to room {room.room_number} ({room.vertical.value})")
        return allocation

    def vacate(self, caller: CurrentUser, allocation_id: str, reason: str = "Vacated") -> RoomAllocation:
        allocation = self._get_active(caller, allocation_id)
        room = self._lock_room(allocation.room_id)
        with self.transaction():
            self._release(room, allocation, caller, AllocationStatus.ENDED, reason)
            self.audit.log(
                AuditAction.VACATE, "allocation", allocation.id, caller,
                old_value={"status": AllocationStatus.ACTIVE},
                new_value={"status": AllocationStatus.ENDED, "reason": reason},
            )
        return allocation

    def transfer(self, caller: CurrentUser, allocation_id: str, target_room_id: str, reason: str) -> RoomAllocation:
        """Move a student to another room; both sides change in one transaction."""
        allocation = self._get_active(caller, allocation_id)
        if allocation.room_id == target_room_id:
            raise ValidationError("Target room is the current room", field="targetRoomId")

        source = self._lock_room(allocation.room_id)
        target = self._lock_room(target_room_id)
        if target.vertical != allocation.vertical:
            raise BusinessRuleViolation("vertical_mismatch", "Cannot transfer to a room of another vertical")
        self._ensure_can_take(target)

        with self.transaction():
            self._release(source, allocation, caller, AllocationStatus.TRANSFERRED, reason)
            replacement = self._occupy(target, allocation.student, caller, None)
            replacement.check_in_confirmed = allocation.check_in_confirmed
            replacement.checked_in_at = allocation.checked_in_at
            allocation.transferred_to_id = replacement.id
            self.audit.log(
                AuditAction.TRANSFER, "allocation", allocation.id, caller,
                old_value={"room_id": source.id, "room_number": source.room_number},
                new_value={"room_id": target.id, "room_number": target.room_number, "allocation_id": replacement.id},
                metadata={"reason": reason},
            )
        return replacement

    def confirm_check_in(self, caller: CurrentUser, allocation_id: str) -> RoomAllocation:
        allocation = self.allocations.find_by_id(allocation_id)
        if allocation is None:
            raise NotFoundError("Allocation", allocation_id)
        if caller.role == UserRole.STUDENT:
            if allocation.student_id != caller.id:
                raise AuthorizationError("You can only confirm your own check-in")
        else:
            self.ensure_vertical_access(caller, allocation.vertical)
        if allocation.status != AllocationStatus.ACTIVE:
            raise BusinessRuleViolation("allocation_inactive", "Allocation is no longer active")
        if allocation.check_in_confirmed:
            raise ConflictError("Check-in already confirmed")

        with self.transaction():
            allocation.check_in_confirmed = True
            allocation.checked_in_at = utcnow()
            self.audit.log(AuditAction.UPDATE, "allocation", allocation.id, caller, new_value={"check_in_confirmed": True})
        return allocation

    def student_allocation(self, student_id: str) -> Optional[RoomAllocation]:
        return self.allocations.active_for_student(student_id)

    def list_allocations(
        self,
        caller: CurrentUser,
        status: Optional[AllocationStatus] = None,
        vertical: Optional[Vertical] = None,
        room_id: Optional[str] = None,
        student_id: Optional[str] = None,
    ) -> List[RoomAllocation]:
        vertical = self.scoped_vertical(caller, vertical)
        return self.allocations.list_allocations(status=status, vertical=vertical, room_id=room_id, student_id=student_id)

    # helpers

    def _get_student(self, student_id: str) -> User:
        student = self.users.find_by_id(student_id)
        if student is None or student.role != UserRole.STUDENT:
            raise NotFoundError("Student", student_id)
        if not student.is_active:
            raise BusinessRuleViolation("student_inactive", "Student account is inactive")
        return student

    def _lock_room(self, room_id: str) -> Room:
        room = self.rooms.get_for_update(room_id)
        if room is None:
            raise NotFoundError("Room", room_id)
        return room

    def _get_active(self, caller: CurrentUser, allocation_id: str) -> RoomAllocation:
        allocation = self.allocations.find_by_id(allocation_id)
        if allocation is None:
            raise NotFoundError("Allocation", allocation_id)
        self.ensure_vertical_access(caller, allocation.vertical)
        if allocation.status != AllocationStatus.ACTIVE:
            raise BusinessRuleViolation("allocation_inactive", "Allocation is no longer active")
        return allocation

    @staticmethod
    def _ensure_can_take(room: Room) -> None:
        if room.status == RoomStatus.MAINTENANCE:
            raise BusinessRuleViolation("room_maintenance", "Room is under maintenance")
        if room.occupied_count >= room.capacity:
            raise ConflictError("Room is at full capacity")

    def _occupy(self, room: Room, student: User, caller: CurrentUser, bed_label: Optional[str]) -> RoomAllocation:
        allocation = self.allocations.add(
            RoomAllocation(
                room_id=room.id,
                student_id=student.id,
                vertical=room.vertical,
                status=AllocationStatus.ACTIVE,
                bed_label=bed_label,
                allocated_at=utcnow(),
                allocated_by=caller.id,
                check_in_confirmed=False,
            )
        )
        room.occupied_count += 1
        room.refresh_status(keep_manual=False)
        return allocation

    @staticmethod
    def _release(room: Room, allocation: RoomAllocation, caller: CurrentUser, status: AllocationStatus, reason: str) -> None:
        allocation.status = status
        allocation.ended_at = utcnow()
        allocation.ended_by = caller.id
        allocation.end_reason = reason
        room.occupied_count = max(0, room.occupied_count - 1)
        room.refresh_status(keep_manual=False)
