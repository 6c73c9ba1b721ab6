"""Business-time normalizer.

All day boundaries and deadlines are computed in the fixed business timezone
(UTC+7), never in the host's local timezone.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, List

from lineadmin.constants.lock_config import (
    BUSINESS_TZ,
    LOCK_DEADLINE_HOUR,
    LOCK_WINDOW_DAYS,
    SUBMIT_DEADLINE_HOUR,
)
from lineadmin.utils.parsers import _parse_date_optional

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def business_now(clock: Clock | None = None) -> datetime:
    """Current instant expressed in the business timezone.

    Naive clock values are taken as UTC.
    """
    now = (clock or system_clock)()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(BUSINESS_TZ)


def to_calendar_day(value: Any) -> date | None:
    """Normalize a stored day value to a business calendar day.

    Aware datetimes are converted to the business timezone before the
    time-of-day is dropped; naive datetimes and dates keep their y/m/d.
    """
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(BUSINESS_TZ).date()
    return _parse_date_optional(value)


def business_today(now: datetime) -> date:
    return to_calendar_day(now)


def window_days(now: datetime, days: int = LOCK_WINDOW_DAYS) -> List[date]:
    """Calendar days of the trailing window ending at business today, oldest first."""
    today = business_today(now)
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def at_business_time(day: date, hour: int) -> datetime:
    return datetime.combine(day, time(hour, 0), tzinfo=BUSINESS_TZ)


def lock_deadline(day: date) -> datetime:
    """Instant at which an unresolved past day becomes locked: next day 12:00."""
    return at_business_time(day + timedelta(days=1), LOCK_DEADLINE_HOUR)


def submit_deadline(day: date) -> datetime:
    """Instant from which today's deposit can be submitted: same day 23:00."""
    return at_business_time(day, SUBMIT_DEADLINE_HOUR)
