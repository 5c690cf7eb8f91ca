"""
Communication log schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from hostel_admin.schemas.common.base import BaseDBSchema, BaseSchema
from hostel_admin.schemas.common.enums import (
    CommunicationChannel,
    CommunicationContext,
    CommunicationStatus,
)

__all__ = [
    "MessageSend",
    "MessageStatusUpdate",
    "MessageEscalate",
    "CommunicationResponse",
]


class MessageSend(BaseSchema):
    """
    Send or schedule a message.

    Either ``template_key`` (one of the built-in templates) or a literal
    ``message`` must be given; ``{{name}}`` placeholders in either are
    filled from ``variables``.
    """

    channel: CommunicationChannel
    recipients: List[str] = Field(..., min_length=1, max_length=500)
    context: CommunicationContext = CommunicationContext.GENERAL
    subject: Optional[str] = Field(default=None, max_length=255)
    template_key: Optional[str] = Field(default=None, max_length=100)
    message: Optional[str] = Field(default=None, max_length=2000)
    variables: Dict[str, Any] = Field(default_factory=dict)
    scheduled_at: Optional[datetime] = None
    related_entity_type: Optional[str] = Field(default=None, max_length=50)
    related_entity_id: Optional[str] = None

    @model_validator(mode="after")
    def template_or_message(self) -> "MessageSend":
        if not self.template_key and not self.message:
            raise ValueError("Either a template or a message body is required")
        return self


class MessageStatusUpdate(BaseSchema):
    status: CommunicationStatus
    error: Optional[str] = Field(default=None, max_length=1000)


class MessageEscalate(BaseSchema):
    reason: str = Field(..., min_length=3, max_length=500)


class CommunicationResponse(BaseDBSchema):
    channel: CommunicationChannel
    status: CommunicationStatus
    context: CommunicationContext
    sender_id: Optional[str] = None
    recipients: List[str]
    subject: Optional[str] = None
    template_key: Optional[str] = None
    message: str
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None
    error: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    escalated: bool
    escalated_at: Optional[datetime] = None
    escalation_reason: Optional[str] = None
