"""Staff and student login, token refresh and password management."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from hostel_admin.api.deps import get_client_info, get_current_user, get_db
from hostel_admin.api.responses import ok, one
from hostel_admin.schemas.auth import (
    AccessTokenResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    RefreshRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from hostel_admin.schemas.common import MessageResponse, SuccessResponse
from hostel_admin.schemas.user import UserResponse
from hostel_admin.services.auth_service import AuthService
from hostel_admin.services.common.context import CurrentUser

router = APIRouter()


@router.post("/login", response_model=SuccessResponse[TokenResponse])
def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    ip_address, user_agent = get_client_info(request)
    tokens = AuthService(db).login(payload.identifier, payload.password, ip_address, user_agent)
    return ok(tokens, "Login successful")


@router.post("/refresh", response_model=SuccessResponse[AccessTokenResponse])
def refresh_token(payload: RefreshRequest, db: Session = Depends(get_db)):
    return ok(AuthService(db).refresh(payload.refresh_token))


@router.post("/logout", response_model=MessageResponse)
def logout(
    payload: Optional[RefreshRequest] = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    AuthService(db).logout(current_user, payload.refresh_token if payload else None)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=SuccessResponse[UserResponse])
def read_me(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return one(UserResponse, AuthService(db).me(current_user))


@router.post("/change-password", response_model=SuccessResponse[UserResponse])
def change_password(
    payload: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = AuthService(db).change_password(current_user, payload.current_password, payload.new_password)
    return one(UserResponse, user, "Password changed successfully")


@router.post("/forgot-password", response_model=SuccessResponse[ForgotPasswordResponse])
def forgot_password(request: Request, payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    ip_address, user_agent = get_client_info(request)
    result = AuthService(db).forgot_password(payload.contact, ip_address, user_agent)
    return ok(result, result.message)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(request: Request, payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    ip_address, user_agent = get_client_info(request)
    AuthService(db).reset_password(payload.token, payload.otp, payload.new_password, ip_address, user_agent)
    return MessageResponse(message="Password has been reset. Please log in with your new password.")
