from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import STAFF, get_current_user, get_db, require_roles
from hostel_admin.api.responses import ok, one, paginated
from hostel_admin.schemas.common import PaginatedResponse, SuccessResponse
from hostel_admin.schemas.common.enums import UserRole, Vertical
from hostel_admin.schemas.user import (
    DataExportResponse,
    ErasureRequest,
    ErasureResponse,
    ProfileUpdate,
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserStatusUpdate,
)
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.data_rights_service import DataRightsService
from hostel_admin.services.user_service import UserService

router = APIRouter()


@router.get("/profile", response_model=SuccessResponse[UserResponse])
def get_profile(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return one(UserResponse, UserService(db).get_profile(current_user))


@router.put("/profile", response_model=SuccessResponse[UserResponse])
def update_profile(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = UserService(db).update_profile(current_user, payload)
    return one(UserResponse, user, "Profile updated successfully")


@router.get("/profile/export", response_model=SuccessResponse[DataExportResponse])
def export_my_data(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return ok(DataRightsService(db).export(current_user, current_user.id), "Data export generated")

@router.get("", response_model=PaginatedResponse[UserResponse])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Optional[UserRole] = None,
    vertical: Optional[Vertical] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None, max_length=100),
    current_user: CurrentUser = Depends(require_roles(*STAFF)),
    db: Session = Depends(get_db),
):
    result = UserService(db).list_users(current_user, page, limit, role, vertical, is_active, search)
    return paginated(UserResponse, result)


@router.post("", response_model=SuccessResponse[UserCreatedResponse], status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    current_user: CurrentUser = Depends(require_roles(UserRole.TRUSTEE)),
    db: Session = Depends(get_db),
):
    user, temporary_password = UserService(db).create_user(current_user, payload)
    created = UserCreatedResponse(user=UserResponse.model_validate(user), temporary_password=temporary_password)
    return ok(created, "User created successfully")


@router.get("/{user_id}", response_model=SuccessResponse[UserResponse])
def get_user(
    user_id: str,
    current_user: CurrentUser = Depends(require_roles(*STAFF)),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    user = service.get_user(user_id)
    service.ensure_vertical_access(current_user, user.vertical)
    return one(UserResponse, user)


@router.patch("/{user_id}/status", response_model=SuccessResponse[UserResponse])
def set_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    current_user: CurrentUser = Depends(require_roles(UserRole.TRUSTEE)),
    db: Session = Depends(get_db),
):
    user = UserService(db).set_status(current_user, user_id, payload.is_active)
    message = "User activated" if user.is_active else "User deactivated"
    return one(UserResponse, user, message)


@router.get("/{user_id}/export", response_model=SuccessResponse[DataExportResponse])
def export_user_data(
    user_id: str,
    current_user: CurrentUser = Depends(require_roles(UserRole.TRUSTEE)),
    db: Session = Depends(get_db),
):
    return ok(DataRightsService(db).export(current_user, user_id), "Data export generated")


@router.post("/{user_id}/erase", response_model=SuccessResponse[ErasureResponse])
def erase_user_data(
    user_id: str,
    payload: ErasureRequest,
    current_user: CurrentUser = Depends(require_roles(UserRole.TRUSTEE)),
    db: Session = Depends(get_db),
):
    result = DataRightsService(db).erase(current_user, user_id, payload.reason)
    return ok(result, "Personal data erased")
