"""Declarative base shared by every model."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def import_models() -> None:
    """Import all models so they register with ``Base.metadata``."""
    import hostel_admin.models  # noqa: F401
