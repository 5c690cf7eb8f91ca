from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import get_db, require_roles
from hostel_admin.api.responses import many, ok, one
from hostel_admin.schemas.common import SuccessResponse
from hostel_admin.schemas.common.enums import (
    CommunicationChannel,
    CommunicationContext,
    CommunicationStatus,
    UserRole,
)
from hostel_admin.schemas.communication import (
    CommunicationResponse,
    MessageEscalate,
    MessageSend,
    MessageStatusUpdate,
)
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.communication_service import CommunicationService

router = APIRouter()

office_staff = require_roles(UserRole.SUPERINTENDENT, UserRole.TRUSTEE, UserRole.ACCOUNTS)


@router.post("", response_model=SuccessResponse[CommunicationResponse], status_code=status.HTTP_201_CREATED)
def send_message(payload: MessageSend, current_user: CurrentUser = Depends(office_staff), db: Session = Depends(get_db)):
    entry = CommunicationService(db).send(current_user, payload)
    if entry.status == CommunicationStatus.SCHEDULED:
        message = "Message scheduled"
    elif entry.status == CommunicationStatus.FAILED:
        message = "Message could not be delivered"
    else:
        message = "Message sent"
    return one(CommunicationResponse, entry, message)


@router.get("", response_model=SuccessResponse[List[CommunicationResponse]])
def list_messages(
    limit: int = Query(50, ge=1, le=100),
    channel: Optional[CommunicationChannel] = None,
    status: Optional[CommunicationStatus] = None,
    context: Optional[CommunicationContext] = None,
    escalated: Optional[bool] = None,
    current_user: CurrentUser = Depends(office_staff),
    db: Session = Depends(get_db),
):
    entries = CommunicationService(db).list_messages(limit, channel, status, context, escalated)
    return ok(many(CommunicationResponse, entries))


@router.get("/{message_id}", response_model=SuccessResponse[CommunicationResponse])
def get_message(message_id: str, current_user: CurrentUser = Depends(office_staff), db: Session = Depends(get_db)):
    return one(CommunicationResponse, CommunicationService(db).get(message_id))


@router.patch("/{message_id}/status", response_model=SuccessResponse[CommunicationResponse])
def update_message_status(
    message_id: str,
    payload: MessageStatusUpdate,
    current_user: CurrentUser = Depends(office_staff),
    db: Session = Depends(get_db),
):
    entry = CommunicationService(db).update_status(current_user, message_id, payload.status, payload.error)
    return one(CommunicationResponse, entry, "Status updated")


@router.post("/{message_id}/escalate", response_model=SuccessResponse[CommunicationResponse])
def escalate_message(
    message_id: str,
    payload: MessageEscalate,
    current_user: CurrentUser = Depends(office_staff),
    db: Session = Depends(get_db),
):
    entry = CommunicationService(db).escalate(current_user, message_id, payload.reason)
    return one(CommunicationResponse, entry, "Message escalated")
