from hostel_admin.db.base import Base
from hostel_admin.db.session import SessionLocal, engine, get_db

__all__ = ["Base", "SessionLocal", "engine", "get_db"]
