"""
Lock Check Configuration - Source of Truth (SOT)
================================================
Business rules shared by the API and the sweep worker.
Change lock timing rules here only.

Version: 1.0
"""

from datetime import timedelta, timezone
from enum import Enum

# =============================================================================
# 1. ENUMS
# =============================================================================

class DayLockState(str, Enum):
    """Classification of one window day"""
    LOCKED = "LOCKED"
    ACTIVE = "ACTIVE"
    NONE = "NONE"


# =============================================================================
# 2. Business timezone (fixed offset, no DST)
# =============================================================================

BUSINESS_UTC_OFFSET_HOURS: int = 7          # Bangkok
BUSINESS_TZ = timezone(timedelta(hours=BUSINESS_UTC_OFFSET_HOURS), name="UTC+07:00")


# =============================================================================
# 3. Window & deadlines
# =============================================================================

LOCK_WINDOW_DAYS: int = 7       # 6 past days + today

LOCK_DEADLINE_HOUR: int = 12    # past day locks at (day + 1) 12:00
SUBMIT_DEADLINE_HOUR: int = 23  # today's deposit becomes submittable at 23:00


# =============================================================================
# 4. Daily activity counters
# =============================================================================

ACTIVITY_FIELDS: tuple[str, ...] = (
    "registrations_count",
    "friends_added_count",
    "groups_created_count",
    "messages_sent_count",
)

