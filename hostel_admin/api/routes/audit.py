from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hostel_admin.api.deps import STAFF, get_db, require_roles
from hostel_admin.api.responses import many, ok, paginated
from hostel_admin.schemas.audit import AuditLogResponse
from hostel_admin.schemas.common import PaginatedResponse, SuccessResponse
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.common.context import CurrentUser

router = APIRouter()


@router.get("", response_model=PaginatedResponse[AuditLogResponse])
def query_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    entity_type: Optional[str] = Query(None, alias="entityType"),
    entity_id: Optional[str] = Query(None, alias="entityId"),
    action: Optional[str] = None,
    actor_id: Optional[str] = Query(None, alias="actorId"),
    success: Optional[bool] = None,
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    current_user: CurrentUser = Depends(require_roles(*STAFF)),
    db: Session = Depends(get_db),
):
    result = AuditService(db).list_logs(
        page, limit, entity_type, entity_id, action, actor_id, success, date_from, date_to
    )
    return paginated(AuditLogResponse, result)


@router.get("/{entity_type}/{entity_id}", response_model=SuccessResponse[List[AuditLogResponse]])
def entity_audit_trail(
    entity_type: str,
    entity_id: str,
    current_user: CurrentUser = Depends(require_roles(*STAFF)),
    db: Session = Depends(get_db),
):
    return ok(many(AuditLogResponse, AuditService(db).entity_trail(entity_type, entity_id)))
