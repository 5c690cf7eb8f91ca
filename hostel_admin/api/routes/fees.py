from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import FINANCE, get_current_user, get_db, require_roles
from hostel_admin.api.responses import ok, one, paginated
from hostel_admin.schemas.common import PaginatedResponse, SuccessResponse
from hostel_admin.schemas.common.enums import FeeType, PaymentStatus
from hostel_admin.schemas.payment import FeeCreate, FeeResponse, FeeSummary, FeeWaive
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.payment_service import PaymentService

router = APIRouter()


@router.post("", response_model=SuccessResponse[FeeResponse], status_code=status.HTTP_201_CREATED)
def create_fee(
    payload: FeeCreate,
    current_user: CurrentUser = Depends(require_roles(*FINANCE)),
    db: Session = Depends(get_db),
):
    return one(FeeResponse, PaymentService(db).create_fee(current_user, payload), "Fee created")


@router.get("", response_model=PaginatedResponse[FeeResponse])
def list_fees(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    student_id: Optional[str] = Query(None, alias="studentId"),
    status: Optional[PaymentStatus] = None,
    fee_type: Optional[FeeType] = Query(None, alias="feeType"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = PaymentService(db).list_fees(current_user, page, limit, student_id, status, fee_type)
    return paginated(FeeResponse, result)


@router.get("/summary/{student_id}", response_model=SuccessResponse[FeeSummary])
def fee_summary(student_id: str, current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return ok(PaymentService(db).summary(current_user, student_id))


@router.get("/{fee_id}", response_model=SuccessResponse[FeeResponse])
def get_fee(fee_id: str, current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return one(FeeResponse, PaymentService(db).get_fee(current_user, fee_id))


@router.post("/{fee_id}/waive", response_model=SuccessResponse[FeeResponse])
def waive_fee(
    fee_id: str,
    payload: FeeWaive,
    current_user: CurrentUser = Depends(require_roles(*FINANCE)),
    db: Session = Depends(get_db),
):
    return one(FeeResponse, PaymentService(db).waive_fee(current_user, fee_id, payload.reason), "Fee waived")
