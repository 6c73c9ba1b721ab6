"""
Backend Constants Package
"""
from .lock_config import (
    DayLockState,
    BUSINESS_UTC_OFFSET_HOURS,
    BUSINESS_TZ,
    LOCK_WINDOW_DAYS,
    LOCK_DEADLINE_HOUR,
    SUBMIT_DEADLINE_HOUR,
    ACTIVITY_FIELDS,
)

__all__ = [
    "DayLockState",
    "BUSINESS_UTC_OFFSET_HOURS",
    "BUSINESS_TZ",
    "LOCK_WINDOW_DAYS",
    "LOCK_DEADLINE_HOUR",
    "SUBMIT_DEADLINE_HOUR",
    "ACTIVITY_FIELDS",
]
