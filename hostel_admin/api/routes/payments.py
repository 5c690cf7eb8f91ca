from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import FINANCE, get_current_user, get_db, require_roles
from hostel_admin.api.responses import one, paginated
from hostel_admin.schemas.common import PaginatedResponse, SuccessResponse
from hostel_admin.schemas.common.enums import PaymentMethod
from hostel_admin.schemas.payment import PaymentCreate, PaymentResponse
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.payment_service import PaymentService

router = APIRouter()


@router.post("", response_model=SuccessResponse[PaymentResponse], status_code=status.HTTP_201_CREATED)
def record_payment(
    payload: PaymentCreate,
    current_user: CurrentUser = Depends(require_roles(*FINANCE)),
    db: Session = Depends(get_db),
):
    payment = PaymentService(db).record_payment(current_user, payload)
    return one(PaymentResponse, payment, f"Payment recorded. Receipt {payment.receipt_number}")


@router.get("", response_model=PaginatedResponse[PaymentResponse])
def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    student_id: Optional[str] = Query(None, alias="studentId"),
    verified: Optional[bool] = None,
    method: Optional[PaymentMethod] = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = PaymentService(db).list_payments(current_user, page, limit, student_id, verified, method)
    return paginated(PaymentResponse, result)


@router.get("/{payment_id}", response_model=SuccessResponse[PaymentResponse])
def get_payment(payment_id: str, current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return one(PaymentResponse, PaymentService(db).get_payment(current_user, payment_id))


@router.post("/{payment_id}/verify", response_model=SuccessResponse[PaymentResponse])
def verify_payment(
    payment_id: str,
    current_user: CurrentUser = Depends(require_roles(*FINANCE)),
    db: Session = Depends(get_db),
):
    return one(PaymentResponse, PaymentService(db).verify_payment(current_user, payment_id), "Payment verified")
