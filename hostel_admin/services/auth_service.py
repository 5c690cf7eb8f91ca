"""
Authentication service: password login, token refresh, logout,
password changes and OTP based password resets.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from hostel_admin.config.settings import settings
from hostel_admin.core.exceptions import InvalidTokenError, TokenError
from hostel_admin.core.security import REFRESH_TOKEN, get_jwt_manager, get_password_hasher
from hostel_admin.models.user import RevokedToken, User
from hostel_admin.repositories.user_repository import RevokedTokenRepository, UserRepository
from hostel_admin.schemas.auth import AccessTokenResponse, ForgotPasswordResponse, TokenResponse
from hostel_admin.schemas.common.enums import ActorType, AuditAction, ContactType
from hostel_admin.schemas.user import UserResponse
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from hostel_admin.services.otp_service import PASSWORD_RESET_PURPOSE, OTPService
from hostel_admin.utils.datetime_utils import utcnow
from hostel_admin.utils.sms import normalize_phone_number
from hostel_admin.utils.validators import normalize_email

INVALID_CREDENTIALS = "Invalid credentials"
RESET_REQUESTED = "If an account exists with this contact, a password reset OTP has been sent."


class AuthService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.users = UserRepository(db)
        self.revoked = RevokedTokenRepository(db)
        self.audit = AuditService(db)
        self.jwt = get_jwt_manager()
        self.hasher = get_password_hasher()

    def login(
        self,
        identifier: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> TokenResponse:
        identifier = identifier.strip()
        if "@" in identifier:
            user = self.users.find_by_identifier(normalize_email(identifier), None)
        else:
            user = self.users.find_by_identifier(None, normalize_phone_number(identifier))

        if user is None or not self.hasher.verify(password, user.password_hash):
            self.audit.log_login_failed(
                identifier, "invalid credentials",
                user_id=user.id if user else None,
                ip_address=ip_address, user_agent=user_agent,
            )
            self._logger.warning(f"Failed login for identifier {identifier[:3]}***")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.is_active:
            self.audit.log_login_failed(
                identifier, "account inactive", user_id=user.id,
                ip_address=ip_address, user_agent=user_agent,
            )
            raise AuthorizationError("Account is deactivated. Please contact the administrator.")

        with self.transaction():
            user.last_login_at = utcnow()
            self.audit.log_login(user.id, ip_address=ip_address, user_agent=user_agent)

        self._logger.info(f"User {user.id} logged in as {user.role.value}")
        return self._issue_tokens(user)

    def refresh(self, refresh_token: str) -> AccessTokenResponse:
        payload = self.jwt.verify_token(refresh_token, expected_type=REFRESH_TOKEN)
        if self.revoked.is_revoked(payload.get("jti", "")):
            raise InvalidTokenError("Token has been revoked")

        user = self.users.find_by_id(payload.get("sub"))
        if user is None or not user.is_active:
            raise AuthenticationError("User account is not available")

        with self.transaction():
            self.audit.log(AuditAction.TOKEN_REFRESH, "user", user.id, actor_id=user.id)

        return AccessTokenResponse(
            access_token=self._access_token(user),
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    def logout(self, user: CurrentUser, refresh_token: Optional[str] = None) -> None:
        """Revoke the presented access token and, if given, the refresh token."""
        with self.transaction():
            if user.token_jti and not self.revoked.is_revoked(user.token_jti):
                self.revoked.add(
                    RevokedToken(
                        jti=user.token_jti,
                        user_id=user.id,
                        expires_at=self._exp_to_datetime(user.token_exp),
                        revoked_at=utcnow(),
                    )
                )
            if refresh_token:
                try:
                    payload = self.jwt.verify_token(refresh_token, expected_type=REFRESH_TOKEN)
                except TokenError:
                    payload = None
                if payload and payload.get("sub") == user.id and not self.revoked.is_revoked(payload["jti"]):
                    self.revoked.add(
                        RevokedToken(
                            jti=payload["jti"],
                            user_id=user.id,
                            expires_at=self._exp_to_datetime(payload.get("exp")),
                            revoked_at=utcnow(),
                        )
                    )
            self.revoked.purge_expired(utcnow())
            self.audit.log_logout(user)

    def me(self, user: CurrentUser) -> User:
        entity = self.users.find_by_id(user.id)
        if entity is None:
            raise NotFoundError("User", user.id)
        return entity

    def change_password(self, user: CurrentUser, current_password: Optional[str], new_password: str) -> User:
        """
        Change the caller's password.

        The current password may be omitted only during first-time setup.
        """
        entity = self.me(user)
        if not entity.first_login or current_password:
            if not current_password or not self.hasher.verify(current_password, entity.password_hash):
                raise AuthenticationError("Current password is incorrect")
        if current_password and current_password == new_password:
            raise ValidationError("New password must differ from the current password", field="newPassword")

        with self.transaction():
            entity.password_hash = self.hasher.hash(new_password)
            entity.first_login = False
            self.audit.log(AuditAction.PASSWORD_CHANGE, "user", entity.id, user)
        return entity

    def forgot_password(
        self,
        contact: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ForgotPasswordResponse:
        """
        Send a reset code to a registered email address or mobile number.

        Unknown and inactive accounts get the same answer with a handle
        that matches no code, so the response does not reveal whether an
        account exists.
        """
        contact = contact.strip()
        if "@" in contact:
            value, contact_type = normalize_email(contact), ContactType.EMAIL
            user = self.users.find_by_identifier(value, None) if value else None
        else:
            value, contact_type = normalize_phone_number(contact), ContactType.PHONE
            user = self.users.find_by_identifier(None, value) if value else None
        if value is None:
            raise ValidationError("Enter a valid email address or mobile number", field="contact")

        if user is None or not user.is_active:
            self.audit.record(
                AuditAction.PASSWORD_RESET_REQUEST, "user", user.id if user else None,
                actor_id=value, success=False, error_message="no active account",
                ip_address=ip_address, user_agent=user_agent,
            )
            self._logger.info(f"Password reset requested for unknown contact {value[:3]}***")
            return ForgotPasswordResponse(
                token=str(uuid.uuid4()), expires_in=settings.OTP_EXPIRY_SECONDS, message=RESET_REQUESTED
            )

        record, code = OTPService(self.db).issue(
            value, contact_type, user.vertical, PASSWORD_RESET_PURPOSE, ip_address, user_agent
        )
        self.audit.record(
            AuditAction.PASSWORD_RESET_REQUEST, "user", user.id,
            actor_id=user.id, actor_type=ActorType.USER, metadata={"verification_id": record.id},
            ip_address=ip_address, user_agent=user_agent,
        )
        return ForgotPasswordResponse(
            token=record.id,
            expires_in=settings.OTP_EXPIRY_SECONDS,
            message=RESET_REQUESTED,
            dev_otp=code if settings.is_development() else None,
        )

    def reset_password(
        self,
        token: str,
        otp: str,
        new_password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> User:
        record = OTPService(self.db).consume(token, otp, PASSWORD_RESET_PURPOSE, ip_address, user_agent)
        if record.contact_type == ContactType.EMAIL:
            user = self.users.find_by_identifier(record.contact, None)
        else:
            user = self.users.find_by_identifier(None, record.contact)
        if user is None or not user.is_active:
            self._rollback()
            raise AuthenticationError("Account is not available for password reset")

        with self.transaction():
            user.password_hash = self.hasher.hash(new_password)
            user.first_login = False
            self.audit.log(
                AuditAction.PASSWORD_RESET, "user", user.id,
                actor_id=user.id, actor_type=ActorType.USER,
                metadata={"reset_method": "OTP"},
                ip_address=ip_address, user_agent=user_agent,
            )
        self._logger.info(f"Password reset for user {user.id}")
        return user

    # helpers

    def _access_token(self, user: User) -> str:
        return self.jwt.create_access_token(
            user.id, user.role.value, user.vertical.value if user.vertical else None
        )

    def _issue_tokens(self, user: User) -> TokenResponse:
        return TokenResponse(
            access_token=self._access_token(user),
            refresh_token=self.jwt.create_refresh_token(user.id),
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            first_login=user.first_login,
            user=UserResponse.model_validate(user),
        )

    @staticmethod
    def _exp_to_datetime(exp: Optional[int]) -> datetime:
        if not exp:
            return utcnow()
        return datetime.fromtimestamp(exp, tz=timezone.utc).replace(tzinfo=None)
