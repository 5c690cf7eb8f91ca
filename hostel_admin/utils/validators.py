"""Contact validation and masking helpers."""

import re
from typing import Optional

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Lower-case and validate an email address; ``None`` when invalid."""
    if not email:
        return None
    email = email.strip().lower()
    return email if EMAIL_PATTERN.match(email) else None


def is_valid_otp(code: str, length: int = 6) -> bool:
    return bool(re.fullmatch(r'\d{%d}' % length, code or ""))


def mask_email(email: str) -> str:
    """``rahul@example.com`` -> ``ra***@example.com``"""
    local, _, domain = email.partition("@")
    if len(local) <= 2:
        return f"{local[:1]}***@{domain}"
    return f"{local[:2]}***@{domain}"
