"""
Applicant OTP verification.

Applicants prove control of a phone number or email before they can
draft an application; a verified OTP yields a short-lived session token.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import get_client_info, get_db
from hostel_admin.api.responses import ok
from hostel_admin.schemas.common import SuccessResponse
from hostel_admin.schemas.otp import (
    OTPResendRequest,
    OTPResendResponse,
    OTPSendRequest,
    OTPSendResponse,
    OTPStatusResponse,
    OTPVerifyRequest,
    OTPVerifyResponse,
)
from hostel_admin.services.otp_service import OTPService

router = APIRouter()


@router.post("/send", response_model=SuccessResponse[OTPSendResponse], status_code=status.HTTP_201_CREATED)
def send_otp(request: Request, payload: OTPSendRequest, db: Session = Depends(get_db)):
    ip_address, user_agent = get_client_info(request)
    result = OTPService(db).send(payload, ip_address, user_agent)
    return ok(result, result.message)


@router.post("/verify", response_model=SuccessResponse[OTPVerifyResponse])
def verify_otp(request: Request, payload: OTPVerifyRequest, db: Session = Depends(get_db)):
    ip_address, user_agent = get_client_info(request)
    result = OTPService(db).verify(payload.token, payload.otp, ip_address, user_agent)
    return ok(result, result.message)


@router.post("/resend", response_model=SuccessResponse[OTPResendResponse])
def resend_otp(request: Request, payload: OTPResendRequest, db: Session = Depends(get_db)):
    ip_address, user_agent = get_client_info(request)
    result = OTPService(db).resend(payload.token, payload.reason, ip_address, user_agent)
    return ok(result, result.message)


@router.get("/status/{token}", response_model=SuccessResponse[OTPStatusResponse])
def otp_status(token: str, db: Session = Depends(get_db)):
    return ok(OTPService(db).status(token))
