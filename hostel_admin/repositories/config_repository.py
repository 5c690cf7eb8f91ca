"""Configuration tables data access."""

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_admin.models.config import BlackoutDate, LeaveTypeConfig, NotificationRule
from hostel_admin.repositories.base import BaseRepository


class LeaveTypeConfigRepository(BaseRepository[LeaveTypeConfig]):

    def __init__(self, db: Session):
        super().__init__(LeaveTypeConfig, db)

    def for_type(self, leave_type) -> Optional[LeaveTypeConfig]:
        return self.find_one_by(leave_type=leave_type)

    def all_ordered(self, active_only: bool = False) -> List[LeaveTypeConfig]:
        criteria = {"active": True} if active_only else {}
        return self.find_by_criteria(criteria, order_by=[LeaveTypeConfig.name])


class BlackoutDateRepository(BaseRepository[BlackoutDate]):

    def __init__(self, db: Session):
        super().__init__(BlackoutDate, db)

    def overlapping(self, start: date, end: date) -> List[BlackoutDate]:
        return (
            self.query()
            .filter(BlackoutDate.start_date <= end, BlackoutDate.end_date >= start)
            .order_by(BlackoutDate.start_date)
            .all()
        )

    def all_ordered(self) -> List[BlackoutDate]:
        return self.find_by_criteria({}, order_by=[BlackoutDate.start_date])


class NotificationRuleRepository(BaseRepository[NotificationRule]):

    def __init__(self, db: Session):
        super().__init__(NotificationRule, db)

    def all_ordered(self, event: Optional[str] = None) -> List[NotificationRule]:
        return self.find_by_criteria({"event": event}, order_by=[NotificationRule.event, NotificationRule.name])
