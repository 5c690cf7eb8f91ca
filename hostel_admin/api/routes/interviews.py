from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import STAFF, get_db, require_roles
from hostel_admin.api.responses import many, ok, one
from hostel_admin.schemas.application import (
    InterviewCancel,
    InterviewComplete,
    InterviewReschedule,
    InterviewResponse,
    InterviewSchedule,
    InterviewSlot,
)
from hostel_admin.schemas.common import SuccessResponse
from hostel_admin.schemas.common.enums import InterviewStatus, Vertical
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.interview_service import InterviewService

router = APIRouter()

staff_only = require_roles(*STAFF)


@router.post("", response_model=SuccessResponse[InterviewResponse], status_code=status.HTTP_201_CREATED)
def schedule_interview(
    payload: InterviewSchedule,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    return one(InterviewResponse, InterviewService(db).schedule(current_user, payload), "Interview scheduled")


@router.get("", response_model=SuccessResponse[List[InterviewResponse]])
def list_interviews(
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    status: Optional[InterviewStatus] = None,
    vertical: Optional[Vertical] = None,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    interviews = InterviewService(db).list_interviews(current_user, date_from, date_to, status, vertical)
    return ok(many(InterviewResponse, interviews))


@router.get("/slots", response_model=SuccessResponse[List[InterviewSlot]])
def interview_slots(
    day: date = Query(..., alias="date"),
    vertical: Optional[Vertical] = None,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    return ok(InterviewService(db).slots(current_user, day, vertical))


@router.get("/{interview_id}", response_model=SuccessResponse[InterviewResponse])
def get_interview(interview_id: str, current_user: CurrentUser = Depends(staff_only), db: Session = Depends(get_db)):
    return one(InterviewResponse, InterviewService(db).get(current_user, interview_id))


@router.put("/{interview_id}/reschedule", response_model=SuccessResponse[InterviewResponse])
def reschedule_interview(
    interview_id: str,
    payload: InterviewReschedule,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    interview = InterviewService(db).reschedule(current_user, interview_id, payload)
    return one(InterviewResponse, interview, "Interview rescheduled")


@router.post("/{interview_id}/cancel", response_model=SuccessResponse[InterviewResponse])
def cancel_interview(
    interview_id: str,
    payload: InterviewCancel,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    interview = InterviewService(db).cancel(current_user, interview_id, payload.reason)
    return one(InterviewResponse, interview, "Interview cancelled")


@router.post("/{interview_id}/complete", response_model=SuccessResponse[InterviewResponse])
def complete_interview(
    interview_id: str,
    payload: InterviewComplete,
    current_user: CurrentUser = Depends(staff_only),
    db: Session = Depends(get_db),
):
    interview = InterviewService(db).complete(current_user, interview_id, payload)
    return one(InterviewResponse, interview, "Interview completed")
