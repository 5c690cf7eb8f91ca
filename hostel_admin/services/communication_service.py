"""
Outbound messaging and the communication log.

SMS goes through the configured SMS provider. WhatsApp and email have no
provider; those messages are written to the notification logger and
logged as sent.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from hostel_admin.config.logging import get_logger
from hostel_admin.models.communication import CommunicationLog
from hostel_admin.repositories.communication_repository import CommunicationRepository
from hostel_admin.schemas.common.enums import (
    AuditAction,
    CommunicationChannel,
    CommunicationContext,
    CommunicationStatus,
)
from hostel_admin.schemas.communication import MessageSend
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import ConflictError, NotFoundError, ValidationError
from hostel_admin.utils.datetime_utils import to_naive_utc, utcnow
from hostel_admin.utils.sms import SMSService, get_sms_service, mask_phone, normalize_phone_number
from hostel_admin.utils.validators import normalize_email

notification_logger = get_logger("hostel_admin.notifications")

PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")

TEMPLATES: Dict[str, Dict[str, str]] = {
    "fee_reminder": {
        "subject": "Fee reminder",
        "body": "Dear {{name}}, your {{feeType}} of Rs. {{amount}} is due on {{dueDate}}. Please pay on time.",
    },
    "fee_overdue": {
        "subject": "Fee overdue",
        "body": "Dear {{name}}, your {{feeType}} of Rs. {{amount}} was due on {{dueDate}} and is now overdue.",
    },
    "interview_scheduled": {
        "subject": "Interview scheduled",
        "body": "Dear {{name}}, your interview for application {{trackingNumber}} is on {{date}} at {{time}}.",
    },
    "leave_approved": {
        "subject": "Leave approved",
        "body": "{{studentName}}'s {{leaveType}} leave from {{startDate}} to {{endDate}} has been approved.",
    },
    "renewal_reminder": {
        "subject": "Renewal due",
        "body": "Dear {{name}}, your hostel stay is due for renewal on {{dueDate}}. Please submit a renewal application.",
    },
    "general_notice": {
        "subject": "Notice",
        "body": "{{message}}",
    },
}

# manual status updates allowed from each state
STATUS_FLOW = {
    CommunicationStatus.PENDING: (CommunicationStatus.SENT, CommunicationStatus.FAILED),
    CommunicationStatus.SCHEDULED: (CommunicationStatus.SENT, CommunicationStatus.FAILED, CommunicationStatus.PENDING),
    CommunicationStatus.SENT: (CommunicationStatus.DELIVERED, CommunicationStatus.READ, CommunicationStatus.FAILED),
    CommunicationStatus.DELIVERED: (CommunicationStatus.READ,),
    CommunicationStatus.FAILED: (CommunicationStatus.PENDING,),
    CommunicationStatus.READ: (),
}


def render_template(template: str, variables: Dict[str, Any]) -> str:
    """Substitute ``{{name}}`` placeholders; every placeholder must be supplied."""
    missing = sorted({name for name in PLACEHOLDER.findall(template) if name not in variables})
    if missing:
        raise ValidationError(
            f"Missing template variable(s): {', '.join(missing)}",
            field="variables",
            details={"missing": missing},
        )
    return PLACEHOLDER.sub(lambda m: str(variables[m.group(1)]), template)


class CommunicationService(BaseService):

    def __init__(self, db: Session, sms_service: Optional[SMSService] = None):
        super().__init__(db)
        self.repository = CommunicationRepository(db)
        self.audit = AuditService(db)
        self._sms = sms_service

    @property
    def sms(self) -> SMSService:
        if self._sms is None:
            self._sms = get_sms_service()
        return self._sms

    def send(self, caller: CurrentUser, data: MessageSend) -> CommunicationLog:
        with self.transaction():
            entry = self.dispatch(
                channel=data.channel,
                recipients=data.recipients,
                context=data.context,
                template_key=data.template_key,
                message=data.message,
                variables=data.variables,
                subject=data.subject,
                scheduled_at=data.scheduled_at,
                sender_id=caller.id,
                related_entity_type=data.related_entity_type,
                related_entity_id=data.related_entity_id,
            )
            self.audit.log(
                AuditAction.CREATE, "communication", entry.id, caller,
                new_value={"channel": entry.channel, "status": entry.status, "recipients": len(entry.recipients)},
            )
        return entry

    def dispatch(
        self,
        channel: CommunicationChannel,
        recipients: List[str],
        context: CommunicationContext = CommunicationContext.GENERAL,
        template_key: Optional[str] = None,
        message: Optional[str] = None,
        variables: Optional[Dict[str, Any]] = None,
        subject: Optional[str] = None,
        scheduled_at: Optional[datetime] = None,
        sender_id: Optional[str] = None,
        related_entity_type: Optional[str] = None,
        related_entity_id: Optional[str] = None,
    ) -> CommunicationLog:
        """
        Render, deliver and log a message inside the caller's transaction.

        Delivery failures are recorded on the log entry, never raised.
        """
        variables = dict(variables or {})
        if template_key:
            template = TEMPLATES.get(template_key)
            if template is None:
                raise ValidationError(f"Unknown template: {template_key}", field="templateKey")
            body = render_template(message or template["body"], variables)
            subject = subject or template["subject"]
        else:
            body = render_template(message or "", variables)

        recipients = self._normalize_recipients(channel, recipients)
        entry = CommunicationLog(
            channel=channel,
            context=context,
            sender_id=sender_id,
            recipients=recipients,
            subject=subject,
            template_key=template_key,
            variables=variables or None,
            message=body,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
            escalated=False,
        )

        if scheduled_at is not None and to_naive_utc(scheduled_at) > utcnow():
            entry.status = CommunicationStatus.SCHEDULED
            entry.scheduled_at = to_naive_utc(scheduled_at)
        else:
            self._deliver(entry)
        return self.repository.add(entry)

    def list_messages(
        self,
        limit: int = 50,
        channel: Optional[CommunicationChannel] = None,
        status: Optional[CommunicationStatus] = None,
        context: Optional[CommunicationContext] = None,
        escalated: Optional[bool] = None,
    ) -> List[CommunicationLog]:
        query = self.repository.filtered(channel=channel, status=status, context=context, escalated=escalated)
        return query.limit(min(max(limit, 1), 100)).all()

    def get(self, message_id: str) -> CommunicationLog:
        entry = self.repository.find_by_id(message_id)
        if entry is None:
            raise NotFoundError("Message", message_id)
        return entry

    def update_status(
        self,
        caller: CurrentUser,
        message_id: str,
        status: CommunicationStatus,
        error: Optional[str] = None,
    ) -> CommunicationLog:
        entry = self.get(message_id)
        if status == entry.status:
            return entry
        if status not in STATUS_FLOW.get(entry.status, ()):
            raise ValidationError(
                f"Cannot change message status from {entry.status.value} to {status.value}", field="status"
            )
        now = utcnow()
        with self.transaction():
            old = entry.status
            entry.status = status
            if status == CommunicationStatus.SENT:
                entry.sent_at = entry.sent_at or now
            elif status == CommunicationStatus.DELIVERED:
                entry.delivered_at = now
            elif status == CommunicationStatus.READ:
                entry.delivered_at = entry.delivered_at or now
                entry.read_at = now
            elif status == CommunicationStatus.FAILED:
                entry.error = error or entry.error
            self.audit.log_status_change("communication", entry.id, old, status, caller)
        return entry

    def escalate(self, caller: CurrentUser, message_id: str, reason: str) -> CommunicationLog:
        entry = self.get(message_id)
        if entry.escalated:
            raise ConflictError("Message has already been escalated")
        with self.transaction():
            entry.escalated = True
            entry.escalated_at = utcnow()
            entry.escalated_by = caller.id
            entry.escalation_reason = reason
            self.audit.log(
                AuditAction.UPDATE, "communication", entry.id, caller,
                new_value={"escalated": True}, metadata={"reason": reason},
            )
        self._logger.info(f"Message {entry.id} escalated by {caller.id}")
        return entry

    # helpers

    @staticmethod
    def _normalize_recipients(channel: CommunicationChannel, recipients: List[str]) -> List[str]:
        normalized = []
        for recipient in recipients:
            if channel == CommunicationChannel.EMAIL:
                value = normalize_email(recipient)
            else:
                value = normalize_phone_number(recipient)
            if value is None:
                raise ValidationError(f"Invalid recipient: {recipient}", field="recipients")
            if value not in normalized:
                normalized.append(value)
        return normalized

    def _deliver(self, entry: CommunicationLog) -> None:
        now = utcnow()
        if entry.channel != CommunicationChannel.SMS:
            notification_logger.info(
                f"{entry.channel.value} message to {len(entry.recipients)} recipient(s)",
                extra={"channel": entry.channel.value.lower(), "context": entry.context.value},
            )
            entry.status = CommunicationStatus.SENT
            entry.sent_at = now
            return

        errors = []
        for phone in entry.recipients:
            result = self.sms.send_sms(phone, entry.message, context=entry.context.value)
            if result.success:
                entry.provider_message_id = result.message_id or entry.provider_message_id
            else:
                errors.append(f"{mask_phone(phone)}: {result.error}")

        if errors:
            entry.status = CommunicationStatus.FAILED
            entry.error = "; ".join(errors)
        else:
            entry.status = CommunicationStatus.SENT
            entry.sent_at = now
