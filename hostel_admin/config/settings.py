"""
Environment configuration for the hostel administration backend.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

import json
import secrets
import string
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


def _random_secret() -> str:
    """Generate a default secret key if not provided"""
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(48))


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    APP_NAME: str = Field(default="Hostel Admin", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="1.0.0", alias="PROJECT_VERSION")
    API_PREFIX: str = "/api"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    TIMEZONE: str = "Asia/Kolkata"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False
    CORS_ORIGINS: Union[List[str], str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Database
    DATABASE_URL: str = "sqlite:///./hostel_admin.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_POOL_OVERFLOW: int = 5

    # Security
    JWT_SECRET_KEY: str = Field(default_factory=_random_secret)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    OTP_SESSION_EXPIRE_MINUTES: int = 30
    PASSWORD_BCRYPT_ROUNDS: int = 12

    # OTP
    OTP_LENGTH: int = 6
    OTP_EXPIRY_SECONDS: int = 600
    OTP_MAX_ATTEMPTS: int = 3
    OTP_RESEND_COOLDOWN_SECONDS: int = 60

    # SMS
    SMS_PROVIDER: str = "console"
    MSG91_API_KEY: Optional[str] = None
    MSG91_SENDER_ID: Optional[str] = None
    SMS_TIMEOUT: int = 30

    # Business rules
    CONSENT_VALIDITY_MONTHS: int = 6
    RENEWAL_PERIOD_MONTHS: int = 6
    AUDIT_ENABLED: bool = True

    # Bootstrap account created by init_db when both are set
    FIRST_TRUSTEE_EMAIL: Optional[str] = None
    FIRST_TRUSTEE_PASSWORD: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_DIR: Optional[str] = None

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        if isinstance(v, str):
            # Handle JSON string format from .env
            if v.startswith('[') and v.endswith(']'):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('SMS_PROVIDER')
    @classmethod
    def validate_sms_provider(cls, v: str) -> str:
        v = v.lower()
        if v not in {"console", "msg91"}:
            raise ValueError("SMS_PROVIDER must be 'console' or 'msg91'")
        return v

    def get_database_url(self) -> str:
        return self.DATABASE_URL

    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
