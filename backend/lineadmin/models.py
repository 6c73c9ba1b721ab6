"""Lock check domain records.

Plain dataclasses shared by the evaluator, the reconciler and the stores.
Calendar days are ``datetime.date`` values in the business timezone.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from lineadmin.constants.lock_config import ACTIVITY_FIELDS
from lineadmin.utils.parsers import _parse_date_optional, _parse_datetime_optional


@dataclass
class DailyStats:
    """Daily activity record for (account_id, date)."""

    account_id: int
    date: date
    registrations_count: int = 0
    friends_added_count: int = 0
    groups_created_count: int = 0
    messages_sent_count: int = 0
    deposit_count: Optional[int] = None
    deposit_amount: Optional[float] = None

    def has_activity(self) -> bool:
        return any((getattr(self, name) or 0) > 0 for name in ACTIVITY_FIELDS)

    def has_deposit(self) -> bool:
        # Both halves must be present; a half-set pair does not count.
        return self.deposit_count is not None and self.deposit_amount is not None


@dataclass(frozen=True)
class ActiveDay:
    """Today's unresolved activity and when its deposit can be submitted."""

    date: date
    has_activity: bool
    has_deposit: bool
    can_submit_at: datetime
    is_submittable: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "hasActivity": self.has_activity,
            "hasDeposit": self.has_deposit,
            "canSubmitAt": self.can_submit_at.isoformat(),
            "isSubmittable": self.is_submittable,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ActiveDay":
        day = _parse_date_optional(raw.get("date"))
        can_submit_at = _parse_datetime_optional(raw.get("canSubmitAt"))
        if day is None or can_submit_at is None:
            raise ValueError("INVALID_ACTIVE_DATE")
        return cls(
            date=day,
            has_activity=bool(raw.get("hasActivity")),
            has_deposit=bool(raw.get("hasDeposit")),
            can_submit_at=can_submit_at,
            is_submittable=bool(raw.get("isSubmittable")),
        )


@dataclass
class Account:
    """Subset of the account entity owned by the lock check."""

    account_id: int
    username: Optional[str] = None
    locked_dates: List[date] = field(default_factory=list)
    active_dates: List[ActiveDay] = field(default_factory=list)


@dataclass
class LockCheckResult:
    """Evaluator output for one account.

    ``ok`` is False when a store lookup failed; the lists are then empty.
    """

    locked_dates: List[date] = field(default_factory=list)
    active_dates: List[ActiveDay] = field(default_factory=list)
    ok: bool = True


@dataclass
class LockStatus:
    """Persisted lock state returned to on-demand callers."""

    locked_dates: List[date] = field(default_factory=list)
    active_dates: List[ActiveDay] = field(default_factory=list)


@dataclass
class SweepSummary:
    checked: int = 0
    locked: int = 0
    failed: int = 0
