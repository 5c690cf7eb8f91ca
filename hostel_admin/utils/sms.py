"""
SMS utilities:
- Normalization and validation of Indian mobile numbers.
- SMS provider abstraction (console logger for development, MSG91).
- OTP generation and standardized OTP message construction.
"""
from __future__ import annotations

import logging
import re
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from typing import Any, Dict

import requests

from hostel_admin.config.settings import settings
from hostel_admin.core.exceptions import SMSServiceError

logger = logging.getLogger(__name__)

# Optional +91, 91 or 0 prefix, then ten digits starting 6-9
INDIAN_MOBILE_PATTERN = re.compile(r'^(\+91|91|0)?[6-9]\d{9}$')

MAX_SMS_LENGTH_GSM = 160
MAX_CONCAT_PARTS = 6


class SMSStatus(Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass
class SMSMessage:
    """SMS message structure with validation."""
    phone: str
    message: str
    sender_id: str | None = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized = normalize_phone_number(self.phone)
        if normalized is None:
            raise ValueError(f"Invalid phone number: {self.phone}")
        self.phone = normalized

        if not self.message or not self.message.strip():
            raise ValueError("SMS message cannot be empty")
        if len(self.message) > MAX_SMS_LENGTH_GSM * MAX_CONCAT_PARTS:
            raise ValueError(
                f"SMS message too long. Maximum {MAX_SMS_LENGTH_GSM * MAX_CONCAT_PARTS} characters allowed"
            )


@dataclass
class SMSResult:
    """Result of SMS sending operation."""
    success: bool
    message_id: str | None = None
    status: SMSStatus = SMSStatus.PENDING
    error: str | None = None
    provider: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SMSProviderInterface(ABC):
    """Interface for SMS providers."""

    name: str = "base"

    @abstractmethod
    def send_sms(self, message: SMSMessage) -> SMSResult:
        """Send SMS message."""


class ConsoleProvider(SMSProviderInterface):
    """Writes messages to the log instead of delivering them."""

    name = "console"

    def send_sms(self, message: SMSMessage) -> SMSResult:
        logger.info(f"[sms:console] to={mask_phone(message.phone)} body={message.message!r}")
        return SMSResult(
            success=True,
            message_id=f"console-{secrets.token_hex(6)}",
            status=SMSStatus.SENT,
            provider=self.name,
        )


class MSG91Provider(SMSProviderInterface):
    """MSG91 SMS provider (popular in India)."""

    name = "msg91"

    def __init__(self, api_key: str, sender_id: str | None, timeout: int = 30, base_url: str | None = None):
        if not api_key:
            raise SMSServiceError("MSG91_API_KEY is not configured", provider=self.name)
        self.api_key = api_key
        self.sender_id = sender_id
        self.timeout = timeout
        self.base_url = base_url or "https://api.msg91.com/api"

    def send_sms(self, message: SMSMessage) -> SMSResult:
        params = {
            'authkey': self.api_key,
            'mobiles': f"91{message.phone}",
            'message': message.message,
            'sender': message.sender_id or self.sender_id,
            'route': '4',  # Transactional route
            'response': 'json',
        }
        try:
            response = requests.get(f"{self.base_url}/sendhttp.php", params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"MSG91 SMS failed: {e}")
            return SMSResult(success=False, error=str(e), status=SMSStatus.FAILED, provider=self.name)

        if data.get('type') == 'success':
            return SMSResult(
                success=True,
                message_id=data.get('message'),
                status=SMSStatus.SENT,
                provider=self.name,
            )
        return SMSResult(
            success=False,
            error=data.get('message', 'Unknown error'),
            status=SMSStatus.FAILED,
            provider=self.name,
        )


class SMSService:
    """Facade over the configured provider."""

    def __init__(self, provider: SMSProviderInterface):
        self.provider = provider

    def send_sms(self, phone: str, text: str, **metadata: Any) -> SMSResult:
        try:
            message = SMSMessage(phone=phone, message=text, metadata=metadata)
        except ValueError as e:
            return SMSResult(success=False, error=str(e), status=SMSStatus.FAILED, provider=self.provider.name)

        result = self.provider.send_sms(message)
        if not result.success:
            logger.warning(f"SMS to {mask_phone(message.phone)} failed via {result.provider}: {result.error}")
        return result


def normalize_phone_number(phone: str | None) -> str | None:
    """
    Reduce an Indian mobile number to its ten digit local form.

    Accepts ``+91``, ``91`` and ``0`` prefixes with spaces or dashes.
    Returns ``None`` when the input is not a valid mobile number.
    """
    if not phone:
        return None
    cleaned = re.sub(r'[\s\-().]', '', phone.strip())
    if not INDIAN_MOBILE_PATTERN.match(cleaned):
        return None
    return cleaned[-10:]


def mask_phone(phone: str) -> str:
    if not phone or len(phone) < 4:
        return "****"
    return "*" * (len(phone) - 4) + phone[-4:]


def generate_otp(length: int = 6) -> str:
    """Generate a numeric OTP using a cryptographically secure source."""
    if length < 4 or length > 10:
        raise ValueError("OTP length must be between 4 and 10")
    return ''.join(secrets.choice('0123456789') for _ in range(length))


def create_otp_message(otp: str, app_name: str = "Hostel Admin", expiry_minutes: int = 10) -> str:
    """Create standardized OTP message."""
    return (
        f"Your {app_name} verification code is {otp}. "
        f"Valid for {expiry_minutes} minutes. Do not share with anyone."
    )


def build_provider(name: str) -> SMSProviderInterface:
    if name == "msg91":
        return MSG91Provider(
            api_key=settings.MSG91_API_KEY or "",
            sender_id=settings.MSG91_SENDER_ID,
            timeout=settings.SMS_TIMEOUT,
        )
    return ConsoleProvider()


@lru_cache()
def get_sms_service() -> SMSService:
    return SMSService(build_provider(settings.SMS_PROVIDER))
