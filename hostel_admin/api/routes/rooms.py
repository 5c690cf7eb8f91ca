from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import STAFF, get_db, require_roles
from hostel_admin.api.responses import many, ok, one
from hostel_admin.schemas.common import SuccessResponse
from hostel_admin.schemas.common.enums import RoomStatus, Vertical
from hostel_admin.schemas.room import AvailabilityResponse, RoomCreate, RoomResponse, RoomUpdate
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.room_service import RoomService

router = APIRouter()

staff_only = require_roles(*STAFF)


@router.post("", response_model=SuccessResponse[RoomResponse], status_code=status.HTTP_201_CREATED)
def create_room(payload: RoomCreate, current_user: CurrentUser = Depends(staff_only), db: Session = Depends(get_db)):
    room = RoomService(db).create_room(current_user, payload)
    return one(RoomResponse, room, f"Room {room.room_number} created")


@router.get("", response_model=SuccessResponse[List[RoomResponse]])
def list_rooms(
    vertical: Optional[Vertical] = None,
    status: Optional[RoomStatus] = None,
    floor: Optional[int] = Query(None, ge=0),
    available_only: bool = Query(False, alias="availableOnly"),
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    rooms = RoomService(db).list_rooms(current_user, vertical, status, floor, available_only)
    return ok(many(RoomResponse, rooms))


@router.get("/availability", response_model=SuccessResponse[AvailabilityResponse])
def room_availability(
    vertical: Optional[Vertical] = None,
    current_user: CurrentUser = Depends(require_roles()),
    db: Session = Depends(get_db),
):
    return ok(RoomService(db).availability(current_user, vertical))


@router.get("/{room_id}", response_model=SuccessResponse[RoomResponse])
def get_room(room_id: str, current_user: CurrentUser = Depends(staff_only), db: Session = Depends(get_db)):
    return one(RoomResponse, RoomService(db).get_room(current_user, room_id))


@router.put("/{room_id}", response_model=SuccessResponse[RoomResponse])
def update_room(
    room_id: str,
    payload: RoomUpdate,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    return one(RoomResponse, RoomService(db).update_room(current_user, room_id, payload), "Room updated")
