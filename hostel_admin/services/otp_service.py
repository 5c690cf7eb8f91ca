"""
OTP service: send, verify and resend verification codes.

Codes are delivered by SMS for phone numbers and through the notification
logger for email addresses. Only a keyed hash of each code is stored.
"""

from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from hostel_admin.config.logging import get_logger
from hostel_admin.config.settings import settings
from hostel_admin.core.exceptions import SMSServiceError
from hostel_admin.core.security import get_jwt_manager, hash_secret, secrets_match
from hostel_admin.models.otp import OTPVerification
from hostel_admin.repositories.otp_repository import OTPRepository
from hostel_admin.schemas.common.enums import AuditAction, ContactType, Vertical
from hostel_admin.schemas.otp import (
    OTPResendResponse,
    OTPSendRequest,
    OTPSendResponse,
    OTPStatusResponse,
    OTPVerifyResponse,
)
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from hostel_admin.utils.datetime_utils import ceil_seconds, utcnow
from hostel_admin.utils.sms import SMSService, create_otp_message, generate_otp, get_sms_service, mask_phone
from hostel_admin.utils.validators import is_valid_otp, mask_email

notification_logger = get_logger("hostel_admin.notifications")

SESSION_NOT_FOUND = "OTP session not found. Please request a new OTP."

APPLICATION_PURPOSE = "application"
PASSWORD_RESET_PURPOSE = "password_reset"


class OTPService(BaseService):
    """Server side of the applicant OTP flow."""

    def __init__(self, db: Session, sms_service: Optional[SMSService] = None):
        super().__init__(db)
        self.repository = OTPRepository(db)
        self.audit = AuditService(db)
        self.sms = sms_service or get_sms_service()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def send(
        self,
        request: OTPSendRequest,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> OTPSendResponse:
        contact, contact_type = request.contact, request.contact_type
        record, code = self.issue(
            contact, contact_type, request.vertical, APPLICATION_PURPOSE, ip_address, user_agent
        )

        self._logger.info(f"OTP sent to {self._mask(contact, contact_type)} ({request.vertical.value})")
        if contact_type == ContactType.PHONE:
            message = f"OTP sent to {mask_phone(contact)}. Check your SMS messages."
        else:
            message = f"OTP sent to {mask_email(contact)}. Check your inbox."

        return OTPSendResponse(
            token=record.id,
            expires_in=settings.OTP_EXPIRY_SECONDS,
            resend_available_in=settings.OTP_RESEND_COOLDOWN_SECONDS,
            message=message,
            dev_otp=code if settings.is_development() else None,
        )

    def issue(
        self,
        contact: str,
        contact_type: ContactType,
        vertical: Optional[Vertical],
        purpose: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[OTPVerification, str]:
        """
        Create and deliver a fresh code for ``contact``.

        Earlier active codes for the same contact and purpose are
        deactivated. Returns the new record and the plaintext code, which
        is never persisted.
        """
        now = utcnow()

        latest = self.repository.latest_active_for_contact(contact, purpose)
        if latest is not None and not latest.is_expired(now):
            wait = self._cooldown_remaining(latest, now)
            if wait > 0:
                self.audit.log_otp(
                    AuditAction.OTP_SEND, latest.id, contact, contact_type,
                    success=False, error_message="cooldown", metadata={"purpose": purpose},
                    ip_address=ip_address, user_agent=user_agent, commit=True,
                )
                raise RateLimitError(f"Please wait {wait} seconds before requesting a new OTP", retry_after=wait)

        code = generate_otp(settings.OTP_LENGTH)
        try:
            with self.transaction():
                for previous in self.repository.find_active_for_contact(contact, purpose):
                    previous.is_active = False

                record = self.repository.add(
                    OTPVerification(
                        contact=contact,
                        contact_type=contact_type,
                        vertical=vertical,
                        purpose=purpose,
                        code_hash=hash_secret(code),
                        attempts=0,
                        max_attempts=settings.OTP_MAX_ATTEMPTS,
                        resend_count=0,
                        expires_at=now + timedelta(seconds=settings.OTP_EXPIRY_SECONDS),
                        last_sent_at=now,
                        is_active=True,
                        ip_address=ip_address,
                    )
                )
                self._deliver(contact, contact_type, code, record.id)
                self.audit.log_otp(
                    AuditAction.OTP_SEND, record.id, contact, contact_type,
                    metadata={"vertical": vertical.value if vertical else None, "purpose": purpose},
                    ip_address=ip_address, user_agent=user_agent,
                )
        except SMSServiceError as e:
            self.audit.log_otp(
                AuditAction.OTP_SEND, None, contact, contact_type,
                success=False, error_message=e.message, metadata={"purpose": purpose},
                ip_address=ip_address, user_agent=user_agent, commit=True,
            )
            raise
        return record, code

    def verify(
        self,
        token: str,
        otp: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> OTPVerifyResponse:
        record = self._checked_record(token, otp, APPLICATION_PURPOSE, ip_address, user_agent)
        with self.transaction():
            self._mark_verified(record, ip_address, user_agent)

        session_token = get_jwt_manager().create_otp_session_token(
            record.id, record.contact, record.contact_type.value, record.vertical.value
        )
        self._logger.info(f"OTP verified for {self._mask(record.contact, record.contact_type)}")
        return OTPVerifyResponse(
            verified=True,
            session_token=session_token,
            redirect_url=f"/apply/{record.vertical.value.lower()}/form",
            contact=record.contact,
            contact_type=record.contact_type,
            vertical=record.vertical,
        )

    def consume(
        self,
        token: str,
        otp: str,
        purpose: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> OTPVerification:
        """Check a code issued for ``purpose`` and mark it used in the caller's transaction."""
        record = self._checked_record(token, otp, purpose, ip_address, user_agent)
        self._mark_verified(record, ip_address, user_agent)
        return record

    def resend(
        self,
        token: str,
        reason: str = "user_request",
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> OTPResendResponse:
        record = self.repository.find_by_id(token)
        if record is None or not record.is_active:
            raise NotFoundError("OTP session", message=SESSION_NOT_FOUND)
        if record.verified_at is not None:
            raise ConflictError("OTP has already been verified.")

        now = utcnow()
        wait = self._cooldown_remaining(record, now)
        if wait > 0:
            self.audit.log_otp(
                AuditAction.OTP_RESEND, record.id, record.contact, record.contact_type,
                success=False, error_message="cooldown", metadata={"reason": reason},
                ip_address=ip_address, user_agent=user_agent, commit=True,
            )
            raise RateLimitError(f"Please wait {wait} seconds before requesting a new OTP", retry_after=wait)

        code = generate_otp(settings.OTP_LENGTH)
        with self.transaction():
            record.code_hash = hash_secret(code)
            record.attempts = 0
            record.expires_at = now + timedelta(seconds=settings.OTP_EXPIRY_SECONDS)
            record.last_sent_at = now
            record.resend_count += 1
            self._deliver(record.contact, record.contact_type, code, record.id)
            self.audit.log_otp(
                AuditAction.OTP_RESEND, record.id, record.contact, record.contact_type,
                metadata={"reason": reason, "resend_count": record.resend_count},
                ip_address=ip_address, user_agent=user_agent,
            )

        if record.contact_type == ContactType.PHONE:
            masked = mask_phone(record.contact)
        else:
            masked = mask_email(record.contact)
        return OTPResendResponse(
            message=f"New OTP sent to {masked}",
            expires_in=settings.OTP_EXPIRY_SECONDS,
            resend_available_in=settings.OTP_RESEND_COOLDOWN_SECONDS,
            resend_count=record.resend_count,
            dev_otp=code if settings.is_development() else None,
        )

    def status(self, token: str) -> OTPStatusResponse:
        """Countdown values for the client timer."""
        record = self.repository.find_by_id(token)
        if record is None:
            raise NotFoundError("OTP session", message=SESSION_NOT_FOUND)
        now = utcnow()
        live = record.is_active and record.verified_at is None
        return OTPStatusResponse(
            token=record.id,
            contact=self._mask(record.contact, record.contact_type),
            expires_in=ceil_seconds(record.expires_at - now) if live else 0,
            resend_available_in=self._cooldown_remaining(record, now) if live else 0,
            attempts_remaining=record.attempts_remaining,
            verified=record.verified_at is not None,
            active=record.is_active,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _cooldown_remaining(record: OTPVerification, now) -> int:
        elapsed = now - record.last_sent_at
        return ceil_seconds(timedelta(seconds=settings.OTP_RESEND_COOLDOWN_SECONDS) - elapsed)

    @staticmethod
    def _mask(contact: str, contact_type: ContactType) -> str:
        return mask_phone(contact) if contact_type == ContactType.PHONE else mask_email(contact)

    def _checked_record(
        self, token: str, otp: str, purpose: str, ip_address, user_agent
    ) -> OTPVerification:
        """Run every check on a submitted code; failed attempts are persisted."""
        if not is_valid_otp(otp, settings.OTP_LENGTH):
            raise ValidationError(f"Invalid OTP format. Must be {settings.OTP_LENGTH} digits.", field="otp")

        record = self.repository.find_by_id(token)
        if record is None or record.purpose != purpose:
            raise NotFoundError("OTP session", message=SESSION_NOT_FOUND)
        if record.verified_at is not None:
            raise ConflictError("OTP has already been verified.")
        if not record.is_active:
            raise NotFoundError("OTP session", message=SESSION_NOT_FOUND)

        if record.attempts >= record.max_attempts:
            self._verify_failed(record, "max attempts", ip_address, user_agent)
            raise RateLimitError("Too many failed attempts. Please request a new OTP.")
        if record.is_expired(utcnow()):
            self._verify_failed(record, "expired", ip_address, user_agent)
            raise AuthenticationError("OTP has expired. Please request a new one.")

        if not secrets_match(otp, record.code_hash):
            record.attempts += 1
            remaining = record.attempts_remaining
            self._verify_failed(record, "invalid code", ip_address, user_agent)
            if remaining > 0:
                raise AuthenticationError(f"Invalid OTP. {remaining} attempt(s) remaining.")
            raise AuthenticationError("Invalid OTP. Maximum attempts reached. Please request a new OTP.")
        return record

    def _mark_verified(self, record: OTPVerification, ip_address, user_agent) -> None:
        record.verified_at = utcnow()
        record.is_active = False
        self.audit.log_otp(
            AuditAction.OTP_VERIFY, record.id, record.contact, record.contact_type,
            metadata={"purpose": record.purpose},
            ip_address=ip_address, user_agent=user_agent,
        )

    def _verify_failed(self, record: OTPVerification, reason: str, ip_address, user_agent) -> None:
        """Persist the attempt counter together with the failure audit."""
        self.audit.log_otp(
            AuditAction.OTP_VERIFY, record.id, record.contact, record.contact_type,
            success=False, error_message=reason,
            metadata={"attempts": record.attempts},
            ip_address=ip_address, user_agent=user_agent,
        )
        self._commit()

    def _deliver(self, contact: str, contact_type: ContactType, code: str, verification_id: str) -> None:
        expiry_minutes = max(1, settings.OTP_EXPIRY_SECONDS // 60)
        text = create_otp_message(code, settings.APP_NAME, expiry_minutes)

        if contact_type == ContactType.EMAIL:
            notification_logger.info(
                f"Email OTP queued for {mask_email(contact)}",
                extra={"channel": "email", "verification_id": verification_id},
            )
            return

        result = self.sms.send_sms(contact, text, verification_id=verification_id)
        if not result.success:
            raise SMSServiceError("Failed to send OTP. Please try again.", provider=result.provider)
