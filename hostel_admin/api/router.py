"""
API router.

Aggregates every endpoint module of the hostel administration backend.
"""

from fastapi import APIRouter

from hostel_admin.api.routes import (
    allocations,
    applications,
    audit,
    auth,
    communications,
    config,
    consent,
    dashboard,
    fees,
    health,
    interviews,
    leaves,
    otp,
    payments,
    renewals,
    rooms,
    users,
)
from hostel_admin.config.logging import get_logger

logger = get_logger(__name__)

api_router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Business Rule Violation"},
        429: {"description": "Too Many Requests"},
        500: {"description": "Internal Server Error"},
    }
)

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(otp.router, prefix="/otp", tags=["OTP Verification"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["User Management"])
api_router.include_router(applications.router, prefix="/applications", tags=["Applications"])
api_router.include_router(interviews.router, prefix="/interviews", tags=["Interviews"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["Room Management"])
api_router.include_router(allocations.router, prefix="/allocations", tags=["Room Allocations"])
api_router.include_router(leaves.router, prefix="/leaves", tags=["Leave Management"])
api_router.include_router(fees.router, prefix="/fees", tags=["Fees"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
api_router.include_router(consent.router, prefix="/consent", tags=["Consent"])
api_router.include_router(audit.router, prefix="/audit", tags=["Audit Logs"])
api_router.include_router(communications.router, prefix="/communications", tags=["Communications"])
api_router.include_router(renewals.router, prefix="/renewals", tags=["Renewals"])
api_router.include_router(config.router, prefix="/config", tags=["Configuration"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboards"])

logger.debug(f"API router assembled with {len(api_router.routes)} routes")
