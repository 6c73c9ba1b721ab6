from .auth import verify_admin_password
from .day_set import DaySet
from .keyed_lock import KeyedLock
from .parsers import _parse_date_optional, _parse_datetime_optional
from .sql_builders import _apply_job_timeouts

__all__ = [
    "DaySet",
    "KeyedLock",
    "_apply_job_timeouts",
    "_parse_date_optional",
    "_parse_datetime_optional",
    "verify_admin_password",
]
