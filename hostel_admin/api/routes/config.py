"""
Hostel configuration: leave types, blackout dates and notification rules.

Everyone signed in can read the configuration; only trustees change it.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hostel_admin.api.deps import get_current_user, get_db, require_roles
from hostel_admin.api.responses import many, ok, one
from hostel_admin.schemas.common import MessageResponse, SuccessResponse
from hostel_admin.schemas.common.enums import UserRole
from hostel_admin.schemas.config import (
    BlackoutDateCreate,
    BlackoutDateResponse,
    BlackoutDateUpdate,
    LeaveTypeConfigCreate,
    LeaveTypeConfigResponse,
    LeaveTypeConfigUpdate,
    NotificationRuleCreate,
    NotificationRuleResponse,
    NotificationRuleUpdate,
)
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.config_service import ConfigService

router = APIRouter()

trustee_only = require_roles(UserRole.TRUSTEE)


# Leave types

@router.get("/leave-types", response_model=SuccessResponse[List[LeaveTypeConfigResponse]])
def list_leave_types(
    active_only: bool = Query(False, alias="activeOnly"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(many(LeaveTypeConfigResponse, ConfigService(db).list_leave_types(active_only)))


@router.post("/leave-types", response_model=SuccessResponse[LeaveTypeConfigResponse], status_code=status.HTTP_201_CREATED)
def create_leave_type(
    payload: LeaveTypeConfigCreate,
    current_user: CurrentUser = Depends(trustee_only),
    db: Session = Depends(get_db),
):
    config = ConfigService(db).create_leave_type(current_user, payload)
    return one(LeaveTypeConfigResponse, config, "Leave type created")


@router.put("/leave-types/{config_id}", response_model=SuccessResponse[LeaveTypeConfigResponse])
def update_leave_type(
    config_id: str,
    payload: LeaveTypeConfigUpdate,
    current_user: CurrentUser = Depends(trustee_only),
    db: Session = Depends(get_db),
):
    config = ConfigService(db).update_leave_type(current_user, config_id, payload)
    return one(LeaveTypeConfigResponse, config, "Leave type updated")


# Blackout dates

@router.get("/blackout-dates", response_model=SuccessResponse[List[BlackoutDateResponse]])
def list_blackout_dates(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return ok(many(BlackoutDateResponse, ConfigService(db).list_blackouts()))


@router.post("/blackout-dates", response_model=SuccessResponse[BlackoutDateResponse], status_code=status.HTTP_201_CREATED)
def create_blackout_date(
    payload: BlackoutDateCreate,
    current_user: CurrentUser = Depends(trustee_only),
    db: Session = Depends(get_db),
):
    return one(BlackoutDateResponse, ConfigService(db).create_blackout(current_user, payload), "Blackout period added")


@router.put("/blackout-dates/{blackout_id}", response_model=SuccessResponse[BlackoutDateResponse])
def update_blackout_date(
    blackout_id: str,
    payload: BlackoutDateUpdate,
    current_user: CurrentUser = Depends(trustee_only),
    db: Session = Depends(get_db),
):
    blackout = ConfigService(db).update_blackout(current_user, blackout_id, payload)
    return one(BlackoutDateResponse, blackout, "Blackout period updated")


@router.delete("/blackout-dates/{blackout_id}", response_model=MessageResponse)
def delete_blackout_date(
    blackout_id: str,
    current_user: CurrentUser = Depends(trustee_only),
    db: Session = Depends(get_db),
):
    ConfigService(db).delete_blackout(current_user, blackout_id)
    return MessageResponse(message="Blackout period removed")


# Notification rules

@router.get("/notification-rules", response_model=SuccessResponse[List[NotificationRuleResponse]])
def list_notification_rules(
    event: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(many(NotificationRuleResponse, ConfigService(db).list_rules(event)))


@router.post(
    "/notification-rules",
    response_model=SuccessResponse[NotificationRuleResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_notification_rule(
    payload: NotificationRuleCreate,
    current_user: CurrentUser = Depends(trustee_only),
    db: Session = Depends(get_db),
):
    return one(NotificationRuleResponse, ConfigService(db).create_rule(current_user, payload), "Rule created")


@router.put("/notification-rules/{rule_id}", response_model=SuccessResponse[NotificationRuleResponse])
def update_notification_rule(
    rule_id: str,
    payload: NotificationRuleUpdate,
    current_user: CurrentUser = Depends(trustee_only),
    db: Session = Depends(get_db),
):
    return one(NotificationRuleResponse, ConfigService(db).update_rule(current_user, rule_id, payload), "Rule updated")


@router.delete("/notification-rules/{rule_id}", response_model=MessageResponse)
def delete_notification_rule(
    rule_id: str,
    current_user: CurrentUser = Depends(trustee_only),
    db: Session = Depends(get_db),
):
    ConfigService(db).delete_rule(current_user, rule_id)
    return MessageResponse(message="Rule deleted")
