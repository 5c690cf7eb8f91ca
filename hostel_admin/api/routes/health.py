from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from hostel_admin.api.deps import get_db
from hostel_admin.config.logging import get_logger
from hostel_admin.config.settings import settings
from hostel_admin.utils.datetime_utils import utcnow

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Liveness plus a database ping."""
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except Exception as e:
        logger.error(f"Health check database ping failed: {e}")
        database = "unavailable"

    return {
        "success": database == "connected",
        "status": "healthy" if database == "connected" else "degraded",
        "service": settings.APP_NAME,
        "version": settings.API_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "timestamp": utcnow().isoformat(),
    }
