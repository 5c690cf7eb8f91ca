from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hostel_admin.api.deps import STAFF, get_db, require_roles
from hostel_admin.api.responses import ok
from hostel_admin.schemas.common import SuccessResponse
from hostel_admin.schemas.common.enums import RenewalStatus, UserRole, Vertical
from hostel_admin.schemas.renewal import RenewalResponse
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.renewal_service import RenewalService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[RenewalResponse]])
def list_renewals(
    status: Optional[RenewalStatus] = None,
    vertical: Optional[Vertical] = None,
    current_user: CurrentUser = Depends(require_roles(*STAFF)),
    db: Session = Depends(get_db),
):
    return ok(RenewalService(db).list_renewals(current_user, status, vertical))


@router.get("/me", response_model=SuccessResponse[Optional[RenewalResponse]])
def my_renewal(
    current_user: CurrentUser = Depends(require_roles(UserRole.STUDENT)),
    db: Session = Depends(get_db),
):
    renewal = RenewalService(db).for_student(current_user)
    return ok(renewal, None if renewal else "No active room allocation")


@router.get("/student/{student_id}", response_model=SuccessResponse[Optional[RenewalResponse]])
def student_renewal(
    student_id: str,
    current_user: CurrentUser = Depends(require_roles(*STAFF)),
    db: Session = Depends(get_db),
):
    return ok(RenewalService(db).for_student(current_user, student_id))
