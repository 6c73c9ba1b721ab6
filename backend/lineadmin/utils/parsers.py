from datetime import date, datetime, timezone
from typing import Any


def _parse_date_optional(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return None
        # yyyy-mm-dd, optionally followed by a time part
        return date.fromisoformat(cleaned[:10])
    raise ValueError("INVALID_DATE")


def _parse_datetime_optional(value: Any) -> datetime | None:
    """Parse an ISO datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    else:
        raise ValueError("INVALID_DATETIME")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
