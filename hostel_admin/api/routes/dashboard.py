from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hostel_admin.api.deps import get_db, require_roles
from hostel_admin.api.responses import ok
from hostel_admin.schemas.common import SuccessResponse
from hostel_admin.schemas.common.enums import UserRole
from hostel_admin.schemas.dashboard import (
    AccountsDashboard,
    ParentDashboard,
    StudentDashboard,
    SuperintendentDashboard,
    TrusteeDashboard,
)
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/student", response_model=SuccessResponse[StudentDashboard])
def student_dashboard(
    current_user: CurrentUser = Depends(require_roles(UserRole.STUDENT)),
    db: Session = Depends(get_db),
):
    return ok(DashboardService(db).student(current_user))


@router.get("/superintendent", response_model=SuccessResponse[SuperintendentDashboard])
def superintendent_dashboard(
    current_user: CurrentUser = Depends(require_roles(UserRole.SUPERINTENDENT)),
    db: Session = Depends(get_db),
):
    return ok(DashboardService(db).superintendent(current_user))


@router.get("/trustee", response_model=SuccessResponse[TrusteeDashboard])
def trustee_dashboard(
    current_user: CurrentUser = Depends(require_roles(UserRole.TRUSTEE)),
    db: Session = Depends(get_db),
):
    return ok(DashboardService(db).trustee(current_user))


@router.get("/accounts", response_model=SuccessResponse[AccountsDashboard])
def accounts_dashboard(
    current_user: CurrentUser = Depends(require_roles(UserRole.ACCOUNTS, UserRole.TRUSTEE)),
    db: Session = Depends(get_db),
):
    return ok(DashboardService(db).accounts(current_user))


@router.get("/parent", response_model=SuccessResponse[ParentDashboard])
def parent_dashboard(
    current_user: CurrentUser = Depends(require_roles(UserRole.PARENT)),
    db: Session = Depends(get_db),
):
    return ok(DashboardService(db).parent(current_user))
