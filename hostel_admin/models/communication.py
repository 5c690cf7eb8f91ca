"""
Outbound message log.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum as SQLEnum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hostel_admin.models.base import TimestampModel
from hostel_admin.schemas.common.enums import (
    CommunicationChannel,
    CommunicationContext,
    CommunicationStatus,
)

__all__ = ["CommunicationLog"]


class CommunicationLog(TimestampModel):
    """One message sent (or queued) to one or more recipients."""

    __tablename__ = "communication_logs"
    __table_args__ = (
        Index("idx_comm_channel_status", "channel", "status"),
        {"comment": "SMS, WhatsApp and email message log"},
    )

    channel: Mapped[CommunicationChannel] = mapped_column(
        SQLEnum(CommunicationChannel, name="communication_channel"), nullable=False
    )
    status: Mapped[CommunicationStatus] = mapped_column(
        SQLEnum(CommunicationStatus, name="communication_status"),
        nullable=False,
        default=CommunicationStatus.PENDING,
    )
    context: Mapped[CommunicationContext] = mapped_column(
        SQLEnum(CommunicationContext, name="communication_context"),
        nullable=False,
        default=CommunicationContext.GENERAL,
    )
    sender_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    recipients: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    subject: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    template_key: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    variables: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_entity_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    related_entity_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    provider_message_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    scheduled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    escalated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    escalated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    escalated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    escalation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
