"""Database initialization utilities."""
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from hostel_admin.config.logging import get_logger
from hostel_admin.config.settings import settings
from hostel_admin.core.security import get_password_hasher
from hostel_admin.db.base import Base, import_models
from hostel_admin.db.session import SessionLocal, engine
from hostel_admin.models.user import User
from hostel_admin.schemas.common.enums import UserRole
from hostel_admin.services.config_service import ConfigService

logger = get_logger(__name__)


def create_tables(bind: Optional[Engine] = None) -> None:
    """
    Create all tables that do not exist yet.

    Note: suitable for development and small deployments; schema changes
    on an existing database still need a migration.
    """
    bind = bind or engine
    import_models()
    existing = inspect(bind).get_table_names()
    Base.metadata.create_all(bind=bind)
    logger.info(f"Database tables ready ({len(existing)} existed before startup)")


def seed_trustee(db) -> Optional[User]:
    """Create the first trustee from settings when no trustee exists."""
    if not (settings.FIRST_TRUSTEE_EMAIL and settings.FIRST_TRUSTEE_PASSWORD):
        return None
    if db.query(User).filter(User.role == UserRole.TRUSTEE).first() is not None:
        return None

    trustee = User(
        full_name="Trustee",
        email=settings.FIRST_TRUSTEE_EMAIL.lower(),
        password_hash=get_password_hasher().hash(settings.FIRST_TRUSTEE_PASSWORD),
        role=UserRole.TRUSTEE,
        is_active=True,
        first_login=True,
    )
    db.add(trustee)
    db.commit()
    logger.info(f"Seeded trustee account {trustee.email}")
    return trustee


def init_db() -> None:
    """Create tables, then seed the first trustee and default leave types."""
    try:
        create_tables()
        with SessionLocal() as db:
            seed_trustee(db)
            created = ConfigService(db).seed_leave_types()
            if created:
                logger.info(f"Seeded {created} default leave type(s)")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise
