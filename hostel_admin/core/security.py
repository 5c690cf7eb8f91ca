"""
Token and password primitives.

JWTManager issues three kinds of tokens: ``access`` and ``refresh`` for
staff and student logins, and ``otp_session`` for applicants who proved
ownership of a phone number or email address.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

import bcrypt
import jwt

from hostel_admin.config.settings import settings
from hostel_admin.core.exceptions import InvalidTokenError, TokenExpiredError

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"
OTP_SESSION_TOKEN = "otp_session"


class JWTManager:
    """
    JWT token manager for authentication.

    Handles creation and validation of signed tokens with a ``jti`` claim
    so individual tokens can be revoked.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60,
        refresh_token_expire_days: int = 30,
        otp_session_expire_minutes: int = 30,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes
        self.refresh_token_expire_days = refresh_token_expire_days
        self.otp_session_expire_minutes = otp_session_expire_minutes

    def _encode(self, subject: str, token_type: str, lifetime: timedelta, claims: Optional[Dict[str, Any]]) -> str:
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": str(subject),
            "type": token_type,
            "iat": now,
            "exp": now + lifetime,
            "jti": secrets.token_hex(16),
        }
        if claims:
            payload.update(claims)
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_access_token(
        self,
        user_id: str,
        role: str,
        vertical: Optional[str] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: User identifier
            role: User role claim
            vertical: Vertical claim for staff and students
            expires_delta: Custom expiration time

        Returns:
            Encoded JWT token
        """
        lifetime = expires_delta or timedelta(minutes=self.access_token_expire_minutes)
        token = self._encode(user_id, ACCESS_TOKEN, lifetime, {"role": role, "vertical": vertical})
        logger.debug(f"Access token created for user {user_id}")
        return token

    def create_refresh_token(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        lifetime = expires_delta or timedelta(days=self.refresh_token_expire_days)
        return self._encode(user_id, REFRESH_TOKEN, lifetime, None)

    def create_otp_session_token(self, verification_id: str, contact: str, contact_type: str, vertical: str) -> str:
        """Token proving the bearer verified ``contact`` for ``vertical``."""
        lifetime = timedelta(minutes=self.otp_session_expire_minutes)
        return self._encode(
            verification_id,
            OTP_SESSION_TOKEN,
            lifetime,
            {"contact": contact, "contact_type": contact_type, "vertical": vertical},
        )

    def verify_token(self, token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Verify and decode JWT token.

        Raises:
            TokenExpiredError: If token is expired
            InvalidTokenError: If token is malformed or of the wrong type
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.warning("Token verification failed: token expired")
            raise TokenExpiredError()
        except jwt.InvalidTokenError as e:
            logger.warning(f"Token verification failed: {e}")
            raise InvalidTokenError()

        if expected_type and payload.get("type") != expected_type:
            raise InvalidTokenError(f"Expected a {expected_type} token")
        return payload


class PasswordHasher:
    """
    Handle password hashing and verification using bcrypt.
    """

    MIN_ROUNDS = 4
    MAX_ROUNDS = 31

    def __init__(self, rounds: int = 12):
        if not (self.MIN_ROUNDS <= rounds <= self.MAX_ROUNDS):
            raise ValueError(
                f"Rounds must be between {self.MIN_ROUNDS} and {self.MAX_ROUNDS}, got {rounds}"
            )
        self.rounds = rounds

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password cannot be empty")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def verify(self, password: str, hashed_password: str) -> bool:
        if not password or not hashed_password:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))
        except ValueError as e:
            logger.warning(f"Password verification failed: {e}")
            return False


def hash_secret(value: str) -> str:
    """Keyed SHA-256 digest for short secrets such as OTP codes."""
    return hmac.new(settings.JWT_SECRET_KEY.encode(), value.encode(), hashlib.sha256).hexdigest()


def secrets_match(value: str, digest: str) -> bool:
    return hmac.compare_digest(hash_secret(value), digest)


@lru_cache()
def get_jwt_manager() -> JWTManager:
    return JWTManager(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_token_expire_days=settings.REFRESH_TOKEN_EXPIRE_DAYS,
        otp_session_expire_minutes=settings.OTP_SESSION_EXPIRE_MINUTES,
    )


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.PASSWORD_BCRYPT_ROUNDS)
