"""Database session management."""
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from hostel_admin.config.settings import settings


def _engine_kwargs() -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"pool_pre_ping": True, "echo": settings.DB_ECHO}
    if settings.is_sqlite():
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_size"] = settings.DB_POOL_SIZE
        kwargs["max_overflow"] = settings.DB_POOL_OVERFLOW
    return kwargs


def enable_sqlite_savepoints(sqlite_engine: Engine) -> None:
    """
    Let SQLAlchemy emit BEGIN itself so SAVEPOINTs behave on pysqlite.

    Audit entries are written inside nested transactions.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = create_engine(settings.get_database_url(), **_engine_kwargs())
if settings.is_sqlite():
    enable_sqlite_savepoints(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function that yields a database session.

    Usage in FastAPI endpoints:
        @router.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
