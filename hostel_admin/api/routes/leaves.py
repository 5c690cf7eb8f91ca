"""Student leave requests and the warden workflow around them."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import STAFF, get_current_user, get_db, require_roles
from hostel_admin.api.responses import many, ok, one, paginated
from hostel_admin.schemas.common import PaginatedResponse, SuccessResponse
from hostel_admin.schemas.common.enums import LeaveStatus, LeaveType, UserRole, Vertical
from hostel_admin.schemas.leave import (
    LeaveCancel,
    LeaveCreate,
    LeaveDecision,
    LeaveMovement,
    LeaveReject,
    LeaveResponse,
    LeaveStats,
)
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.leave_service import LeaveService

router = APIRouter()

staff_only = require_roles(*STAFF)


@router.post("", response_model=SuccessResponse[LeaveResponse], status_code=status.HTTP_201_CREATED)
def apply_leave(
    payload: LeaveCreate,
    current_user: CurrentUser = Depends(require_roles(UserRole.STUDENT)),
    db: Session = Depends(get_db),
):
    leave = LeaveService(db).create(current_user, payload)
    message = "Leave approved" if leave.status == LeaveStatus.APPROVED else "Leave request submitted"
    return one(LeaveResponse, leave, message)


@router.get("", response_model=PaginatedResponse[LeaveResponse])
def list_leaves(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    student_id: Optional[str] = Query(None, alias="studentId"),
    vertical: Optional[Vertical] = None,
    status: Optional[LeaveStatus] = None,
    leave_type: Optional[LeaveType] = Query(None, alias="leaveType"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = LeaveService(db).list_leaves(current_user, page, limit, student_id, vertical, status, leave_type)
    return paginated(LeaveResponse, result)


@router.get("/pending", response_model=SuccessResponse[List[LeaveResponse]])
def pending_leaves(
    vertical: Optional[Vertical] = None,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    return ok(many(LeaveResponse, LeaveService(db).pending(current_user, vertical)))


@router.get("/stats", response_model=SuccessResponse[LeaveStats])
def leave_stats(
    vertical: Optional[Vertical] = None,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    return ok(LeaveService(db).stats(current_user, vertical))


@router.get("/{leave_id}", response_model=SuccessResponse[LeaveResponse])
def get_leave(leave_id: str, current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return one(LeaveResponse, LeaveService(db).get(current_user, leave_id))


@router.post("/{leave_id}/approve", response_model=SuccessResponse[LeaveResponse])
def approve_leave(
    leave_id: str,
    payload: Optional[LeaveDecision] = None,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    leave = LeaveService(db).approve(current_user, leave_id, payload.notes if payload else None)
    return one(LeaveResponse, leave, "Leave approved")


@router.post("/{leave_id}/reject", response_model=SuccessResponse[LeaveResponse])
def reject_leave(
    leave_id: str,
    payload: LeaveReject,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    return one(LeaveResponse, LeaveService(db).reject(current_user, leave_id, payload.reason), "Leave rejected")


@router.post("/{leave_id}/checkout", response_model=SuccessResponse[LeaveResponse])
def checkout_leave(
    leave_id: str,
    payload: Optional[LeaveMovement] = None,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    leave = LeaveService(db).checkout(current_user, leave_id, payload.notes if payload else None)
    return one(LeaveResponse, leave, "Student checked out")


@router.post("/{leave_id}/return", response_model=SuccessResponse[LeaveResponse])
def return_from_leave(
    leave_id: str,
    payload: Optional[LeaveMovement] = None,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    leave = LeaveService(db).mark_returned(current_user, leave_id, payload.notes if payload else None)
    return one(LeaveResponse, leave, "Student marked as returned")


@router.post("/{leave_id}/cancel", response_model=SuccessResponse[LeaveResponse])
def cancel_leave(
    leave_id: str,
    payload: Optional[LeaveCancel] = None,
    current_user: CurrentUser = Depends(require_roles(UserRole.STUDENT)),
    db: Session = Depends(get_db),
):
    leave = LeaveService(db).cancel(current_user, leave_id, payload.reason if payload else None)
    return one(LeaveResponse, leave, "Leave cancelled")
