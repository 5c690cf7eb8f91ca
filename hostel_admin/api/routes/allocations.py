from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import STAFF, get_db, require_roles
from hostel_admin.api.responses import many, ok, one
from hostel_admin.schemas.common import SuccessResponse
from hostel_admin.schemas.common.enums import AllocationStatus, UserRole, Vertical
from hostel_admin.schemas.room import AllocationCreate, AllocationEnd, AllocationResponse, AllocationTransfer
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.room_service import RoomService

router = APIRouter()

staff_only = require_roles(*STAFF)


def _optional(allocation) -> Optional[AllocationResponse]:
    return AllocationResponse.model_validate(allocation) if allocation is not None else None


@router.post("", response_model=SuccessResponse[AllocationResponse], status_code=status.HTTP_201_CREATED)
def allocate_room(
    payload: AllocationCreate,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    allocation = RoomService(db).allocate(current_user, payload)
    return one(AllocationResponse, allocation, f"Room {allocation.room_number} allocated")


@router.get("", response_model=SuccessResponse[List[AllocationResponse]])
def list_allocations(
    status: Optional[AllocationStatus] = None,
    vertical: Optional[Vertical] = None,
    room_id: Optional[str] = None,
    student_id: Optional[str] = None,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    allocations = RoomService(db).list_allocations(current_user, status, vertical, room_id, student_id)
    return ok(many(AllocationResponse, allocations))


@router.get("/me", response_model=SuccessResponse[Optional[AllocationResponse]])
def my_allocation(
    current_user: CurrentUser = Depends(require_roles(UserRole.STUDENT)),
    db: Session = Depends(get_db),
):
    allocation = RoomService(db).student_allocation(current_user.id)
    return ok(_optional(allocation), None if allocation else "No active room allocation")


@router.get("/student/{student_id}", response_model=SuccessResponse[Optional[AllocationResponse]])
def student_allocation(
    student_id: str,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    service = RoomService(db)
    allocation = service.student_allocation(student_id)
    if allocation is not None:
        service.ensure_vertical_access(current_user, allocation.vertical)
    return ok(_optional(allocation))


@router.post("/vacate/{allocation_id}", response_model=SuccessResponse[AllocationResponse])
def vacate_room(
    allocation_id: str,
    payload: Optional[AllocationEnd] = None,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    reason = payload.reason if payload else "Vacated"
    allocation = RoomService(db).vacate(current_user, allocation_id, reason)
    return one(AllocationResponse, allocation, "Room vacated")


@router.post("/{allocation_id}/transfer", response_model=SuccessResponse[AllocationResponse])
def transfer_room(
    allocation_id: str,
    payload: AllocationTransfer,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    allocation = RoomService(db).transfer(current_user, allocation_id, payload.target_room_id, payload.reason)
    return one(AllocationResponse, allocation, f"Student transferred to room {allocation.room_number}")


@router.post("/{allocation_id}/check-in", response_model=SuccessResponse[AllocationResponse])
def confirm_check_in(
    allocation_id: str,
    current_user: CurrentUser = Depends(require_roles(UserRole.STUDENT, *STAFF)),
    db: Session = Depends(get_db),
):
    allocation = RoomService(db).confirm_check_in(current_user, allocation_id)
    return one(AllocationResponse, allocation, "Check-in confirmed")
