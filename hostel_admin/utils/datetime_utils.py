"""
Date and time helpers.

Timestamps are stored as naive UTC datetimes; calendar dates (leave
ranges, due dates) are evaluated in the hostel's configured timezone.
"""

import math
from datetime import date, datetime, timedelta, timezone
from typing import Tuple, Union

import pytz
from dateutil.relativedelta import relativedelta

from hostel_admin.config.settings import settings


def utcnow() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_today() -> date:
    """Current date in the configured hostel timezone"""
    return datetime.now(pytz.timezone(settings.TIMEZONE)).date()


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def add_months(value: Union[date, datetime], months: int) -> Union[date, datetime]:
    return value + relativedelta(months=months)


def ceil_days(delta: timedelta) -> int:
    """Whole days in ``delta``, rounding partial days up."""
    return math.ceil(delta.total_seconds() / 86400)


def ceil_seconds(delta: timedelta) -> int:
    return max(0, math.ceil(delta.total_seconds()))


def month_bounds(day: date) -> Tuple[date, date]:
    """First day of ``day``'s month and first day of the following month."""
    start = day.replace(day=1)
    return start, start + relativedelta(months=1)
