"""
FastAPI dependencies: database session, caller identity and role guards.

Example usage in a router:
    from fastapi import Depends, APIRouter
    from hostel_admin.api import deps

    router = APIRouter()

    @router.get("/me")
    def read_me(current_user = Depends(deps.get_current_user)):
        return current_user
"""

from typing import Callable, Optional, Tuple, Union

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from hostel_admin.config.settings import settings
from hostel_admin.core.exceptions import InvalidTokenError
from hostel_admin.core.security import ACCESS_TOKEN, OTP_SESSION_TOKEN, get_jwt_manager
from hostel_admin.db.session import get_db
from hostel_admin.models.user import User
from hostel_admin.repositories.user_repository import RevokedTokenRepository
from hostel_admin.schemas.common.enums import ContactType, UserRole, Vertical
from hostel_admin.services.common.context import ApplicantSession, CurrentUser
from hostel_admin.services.common.errors import AuthenticationError, AuthorizationError

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False)

Caller = Union[CurrentUser, ApplicantSession]


def get_client_info(request: Request) -> Tuple[Optional[str], Optional[str]]:
    """Client IP (honouring X-Forwarded-For) and user agent."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


def _require_token(token: Optional[str]) -> str:
    if not token:
        raise AuthenticationError("Not authenticated")
    return token


def _user_from_payload(payload: dict, request: Request, db: Session) -> CurrentUser:
    if RevokedTokenRepository(db).is_revoked(payload.get("jti", "")):
        raise InvalidTokenError("Token has been revoked")
    user = db.get(User, payload.get("sub"))
    if user is None:
        raise AuthenticationError("User account no longer exists")
    if not user.is_active:
        raise AuthorizationError("Account is deactivated. Please contact the administrator.")

    ip_address, user_agent = get_client_info(request)
    request.state.user_id = user.id
    return CurrentUser(
        id=user.id,
        role=user.role,
        vertical=user.vertical,
        email=user.email,
        token_jti=payload.get("jti"),
        token_exp=payload.get("exp"),
        ip_address=ip_address,
        user_agent=user_agent,
    )


def _applicant_from_payload(payload: dict, request: Request) -> ApplicantSession:
    ip_address, user_agent = get_client_info(request)
    try:
        return ApplicantSession(
            verification_id=payload["sub"],
            contact=payload["contact"],
            contact_type=ContactType(payload["contact_type"]),
            vertical=Vertical(payload["vertical"]),
            ip_address=ip_address,
            user_agent=user_agent,
        )
    except (KeyError, ValueError):
        raise InvalidTokenError("Malformed OTP session token")


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    payload = get_jwt_manager().verify_token(_require_token(token), expected_type=ACCESS_TOKEN)
    return _user_from_payload(payload, request, db)


def get_applicant_session(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
) -> ApplicantSession:
    payload = get_jwt_manager().verify_token(_require_token(token), expected_type=OTP_SESSION_TOKEN)
    return _applicant_from_payload(payload, request)


def get_caller(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Caller:
    """Either a logged-in user or an applicant holding an OTP session token."""
    payload = get_jwt_manager().verify_token(_require_token(token))
    token_type = payload.get("type")
    if token_type == ACCESS_TOKEN:
        return _user_from_payload(payload, request, db)
    if token_type == OTP_SESSION_TOKEN:
        return _applicant_from_payload(payload, request)
    raise InvalidTokenError(f"Unexpected token type: {token_type}")


def require_roles(*roles: UserRole) -> Callable[..., CurrentUser]:
    """
    Guard a route to the given roles; no roles means any authenticated user.

        @router.post("", dependencies=[Depends(require_roles(UserRole.TRUSTEE))])
    """

    def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if roles and current_user.role not in roles:
            raise AuthorizationError(
                "You do not have permission to perform this action",
                required_permission=",".join(r.value for r in roles),
            )
        return current_user

    return checker


STAFF = (UserRole.SUPERINTENDENT, UserRole.TRUSTEE)
FINANCE = (UserRole.ACCOUNTS, UserRole.TRUSTEE)

__all__ = [
    "get_db",
    "get_client_info",
    "get_current_user",
    "get_applicant_session",
    "get_caller",
    "require_roles",
    "STAFF",
    "FINANCE",
    "Caller",
]
