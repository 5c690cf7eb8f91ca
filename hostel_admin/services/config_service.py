"""
Administrative configuration: leave types, blackout dates and
notification rules.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from hostel_admin.models.config import BlackoutDate, LeaveTypeConfig, NotificationRule
from hostel_admin.repositories.config_repository import (
    BlackoutDateRepository,
    LeaveTypeConfigRepository,
    NotificationRuleRepository,
)
from hostel_admin.schemas.common.enums import AuditAction, LeaveType
from hostel_admin.schemas.config import (
    BlackoutDateCreate,
    BlackoutDateUpdate,
    LeaveTypeConfigCreate,
    LeaveTypeConfigUpdate,
    NotificationRuleCreate,
    NotificationRuleUpdate,
)
from hostel_admin.services.audit_service import AuditService
from hostel_admin.services.base import BaseService
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import AlreadyExistsError, NotFoundError, ValidationError

DEFAULT_LEAVE_TYPES: List[Dict[str, Any]] = [
    {"leave_type": LeaveType.REGULAR, "name": "Regular Leave", "max_days_per_month": 4, "max_days_per_semester": 15},
    {"leave_type": LeaveType.EMERGENCY, "name": "Emergency Leave", "max_days_per_month": None, "max_days_per_semester": None},
    {"leave_type": LeaveType.MEDICAL, "name": "Medical Leave", "max_days_per_month": None, "max_days_per_semester": 30},
    {"leave_type": LeaveType.VACATION, "name": "Vacation", "max_days_per_month": None, "max_days_per_semester": 45},
]


def _values(items) -> List[str]:
    return [getattr(item, "value", item) for item in items]


class ConfigService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self.leave_types = LeaveTypeConfigRepository(db)
        self.blackouts = BlackoutDateRepository(db)
        self.rules = NotificationRuleRepository(db)
        self.audit = AuditService(db)

    # -------------------------------------------------------------------------
    # Leave types
    # -------------------------------------------------------------------------

    def list_leave_types(self, active_only: bool = False) -> List[LeaveTypeConfig]:
        return self.leave_types.all_ordered(active_only)

    def create_leave_type(self, caller: CurrentUser, data: LeaveTypeConfigCreate) -> LeaveTypeConfig:
        if self.leave_types.for_type(data.leave_type) is not None:
            raise AlreadyExistsError("Leave type", "leaveType", data.leave_type.value)
        self._ensure_unique_leave_name(data.name)
        with self.transaction():
            config = self.leave_types.add(
                LeaveTypeConfig(
                    leave_type=data.leave_type,
                    name=data.name,
                    max_days_per_month=data.max_days_per_month,
                    max_days_per_semester=data.max_days_per_semester,
                    requires_approval=data.requires_approval,
                    allowed_verticals=_values(data.allowed_verticals),
                    active=data.active,
                )
            )
            self.audit.log(AuditAction.CREATE, "leave_type_config", config.id, caller, new_value=data.model_dump())
        return config

    def update_leave_type(self, caller: CurrentUser, config_id: str, data: LeaveTypeConfigUpdate) -> LeaveTypeConfig:
        config = self._get(self.leave_types, "Leave type", config_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("name") and changes["name"] != config.name:
            self._ensure_unique_leave_name(changes["name"])
        if "allowed_verticals" in changes and changes["allowed_verticals"] is not None:
            changes["allowed_verticals"] = _values(changes["allowed_verticals"])
        return self._apply(caller, "leave_type_config", config, changes)

    def seed_leave_types(self) -> int:
        """Insert the default leave types that are missing."""
        created = 0
        with self.transaction():
            for defaults in DEFAULT_LEAVE_TYPES:
                if self.leave_types.for_type(defaults["leave_type"]) is None:
                    self.leave_types.add(
                        LeaveTypeConfig(
                            **defaults,
                            requires_approval=True,
                            allowed_verticals=[],
                            active=True,
                        )
                    )
                    created += 1
        return created

    # -------------------------------------------------------------------------
    # Blackout dates
    # -------------------------------------------------------------------------

    def list_blackouts(self) -> List[BlackoutDate]:
        return self.blackouts.all_ordered()

    def create_blackout(self, caller: CurrentUser, data: BlackoutDateCreate) -> BlackoutDate:
        with self.transaction():
            blackout = self.blackouts.add(
                BlackoutDate(
                    name=data.name,
                    start_date=data.start_date,
                    end_date=data.end_date,
                    verticals=_values(data.verticals),
                    reason=data.reason,
                )
            )
            self.audit.log(AuditAction.CREATE, "blackout_date", blackout.id, caller, new_value=data.model_dump())
        return blackout

    def update_blackout(self, caller: CurrentUser, blackout_id: str, data: BlackoutDateUpdate) -> BlackoutDate:
        blackout = self._get(self.blackouts, "Blackout date", blackout_id)
        changes = data.model_dump(exclude_unset=True)
        start = changes.get("start_date") or blackout.start_date
        end = changes.get("end_date") or blackout.end_date
        if end < start:
            raise ValidationError("End date must be on or after start date", field="endDate")
        if changes.get("verticals") is not None:
            changes["verticals"] = _values(changes["verticals"])
        return self._apply(caller, "blackout_date", blackout, changes)

    def delete_blackout(self, caller: CurrentUser, blackout_id: str) -> None:
        blackout = self._get(self.blackouts, "Blackout date", blackout_id)
        with self.transaction():
            self.audit.log(AuditAction.DELETE, "blackout_date", blackout.id, caller, old_value={"name": blackout.name})
            self.blackouts.delete(blackout)

    # -------------------------------------------------------------------------
    # Notification rules
    # -------------------------------------------------------------------------

    def list_rules(self, event: Optional[str] = None) -> List[NotificationRule]:
        return self.rules.all_ordered(event.upper() if event else None)

    def create_rule(self, caller: CurrentUser, data: NotificationRuleCreate) -> NotificationRule:
        with self.transaction():
            rule = self.rules.add(NotificationRule(**data.model_dump()))
            self.audit.log(AuditAction.CREATE, "notification_rule", rule.id, caller, new_value=data.model_dump())
        return rule

    def update_rule(self, caller: CurrentUser, rule_id: str, data: NotificationRuleUpdate) -> NotificationRule:
        rule = self._get(self.rules, "Notification rule", rule_id)
        return self._apply(caller, "notification_rule", rule, data.model_dump(exclude_unset=True))

    def delete_rule(self, caller: CurrentUser, rule_id: str) -> None:
        rule = self._get(self.rules, "Notification rule", rule_id)
        with self.transaction():
            self.audit.log(AuditAction.DELETE, "notification_rule", rule.id, caller, old_value={"name": rule.name})
            self.rules.delete(rule)

    # helpers

    @staticmethod
    def _get(repository, label: str, entity_id: str):
        entity = repository.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(label, entity_id)
        return entity

    def _ensure_unique_leave_name(self, name: str) -> None:
        if self.leave_types.find_one_by(name=name) is not None:
            raise AlreadyExistsError("Leave type", "name", name)

    def _apply(self, caller: CurrentUser, entity_type: str, entity, changes: Dict[str, Any]):
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return entity
        old = {k: getattr(entity, k) for k in changes}
        with self.transaction():
            for key, value in changes.items():
                setattr(entity, key, value)
            self.audit.log(AuditAction.UPDATE, entity_type, entity.id, caller, old_value=old, new_value=changes)
        return entity
