"""
Hostel applications.

Applicants reach these routes with an OTP session token; students, staff
and trustees with a regular access token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import STAFF, Caller, get_caller, get_db, require_roles
from hostel_admin.api.responses import ok, one, paginated
from hostel_admin.schemas.application import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStats,
    ApplicationStatusUpdate,
    ApplicationSummary,
    ApplicationUpdate,
    TrackingResponse,
)
from hostel_admin.schemas.common import PaginatedResponse, SuccessResponse
from hostel_admin.schemas.common.enums import ApplicationStatus, ApplicationType, Vertical
from hostel_admin.services.application_service import ApplicationService
from hostel_admin.services.common.context import CurrentUser

router = APIRouter()


@router.post("", response_model=SuccessResponse[ApplicationResponse], status_code=status.HTTP_201_CREATED)
def create_application(payload: ApplicationCreate, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    application = ApplicationService(db).create(caller, payload)
    return one(ApplicationResponse, application, f"Application {application.tracking_number} created")


@router.get("", response_model=PaginatedResponse[ApplicationSummary])
def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    vertical: Optional[Vertical] = None,
    status: Optional[ApplicationStatus] = None,
    type: Optional[ApplicationType] = None,
    search: Optional[str] = Query(None, max_length=100),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    result = ApplicationService(db).list_applications(caller, page, limit, vertical, status, type, search)
    return paginated(ApplicationSummary, result)


@router.get("/stats", response_model=SuccessResponse[ApplicationStats])
def application_stats(
    vertical: Optional[Vertical] = None,
    current_user: CurrentUser = Depends(require_roles(*STAFF)),
    db: Session = Depends(get_db),
):
    return ok(ApplicationService(db).stats(current_user, vertical))


@router.get("/track/{tracking_number}", response_model=SuccessResponse[TrackingResponse])
def track_application(
    tracking_number: str,
    mobile: str = Query(..., min_length=10, max_length=15),
    db: Session = Depends(get_db),
):
    """Public status lookup by tracking number and the applicant's mobile."""
    return ok(ApplicationService(db).track(tracking_number, mobile))


@router.get("/{application_id}", response_model=SuccessResponse[ApplicationResponse])
def get_application(application_id: str, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    return one(ApplicationResponse, ApplicationService(db).get(caller, application_id))


@router.put("/{application_id}", response_model=SuccessResponse[ApplicationResponse])
def update_application(
    application_id: str,
    payload: ApplicationUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    application = ApplicationService(db).update(caller, application_id, payload)
    return one(ApplicationResponse, application, "Application updated")


@router.delete("/{application_id}", response_model=SuccessResponse[ApplicationResponse])
def withdraw_application(application_id: str, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    application = ApplicationService(db).withdraw(caller, application_id)
    return one(ApplicationResponse, application, "Application withdrawn")

@router.post("/{application_id}/submit", response_model=SuccessResponse[ApplicationResponse])
def submit_application(application_id: str, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    application = ApplicationService(db).submit(caller, application_id)
    return one(ApplicationResponse, application, "Application submitted successfully")


@router.patch("/{application_id}/status", response_model=SuccessResponse[ApplicationResponse])
def update_application_status(
    application_id: str,
    payload: ApplicationStatusUpdate,
    current_user: CurrentUser = Depends(require_roles(*STAFF)),
    db: Session = Depends(get_db),
):
    application = ApplicationService(db).update_status(current_user, application_id, payload)
    return one(ApplicationResponse, application, f"Application moved to {application.status.value}")
