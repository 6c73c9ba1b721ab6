"""Lock check service layer.

Evaluates each account's trailing 7-day activity window, reconciles the
persisted locked/active days, and sweeps all accounts.

Rules:
- A day with activity and no deposit locks at (day + 1) 12:00 business time.
- Today is never locked; it is reported as an active day instead.
- A locked day is only unlocked once its deposit entry is recorded.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple
import logging

from lineadmin import config
from lineadmin.constants.lock_config import DayLockState
from lineadmin.models import (
    Account,
    ActiveDay,
    DailyStats,
    LockCheckResult,
    LockStatus,
    SweepSummary,
)
from lineadmin.services.business_time import (
    Clock,
    business_now,
    lock_deadline,
    submit_deadline,
    system_clock,
    to_calendar_day,
    window_days,
)
from lineadmin.services.lock_store import LockStore, LockStoreSession, StoreError
from lineadmin.utils.day_set import DaySet
from lineadmin.utils.keyed_lock import KeyedLock


logger = logging.getLogger("lineadmin.lock_check")


def classify_day(stats: DailyStats | None, day: date, *, today: date, now: datetime) -> DayLockState:
    """Classify one window day.

    Rules:
    - No record, no activity, or a recorded deposit: NONE
    - Today with unresolved activity: ACTIVE
    - Past day with unresolved activity: LOCKED once its lock deadline has passed
    """
    if stats is None or not stats.has_activity() or stats.has_deposit():
        return DayLockState.NONE
    if day == today:
        return DayLockState.ACTIVE
    if now >= lock_deadline(day):
        return DayLockState.LOCKED
    return DayLockState.NONE


def build_active_day(day: date, now: datetime) -> ActiveDay:
    can_submit_at = submit_deadline(day)
    return ActiveDay(
        date=day,
        has_activity=True,
        has_deposit=False,
        can_submit_at=can_submit_at,
        is_submittable=now >= can_submit_at,
    )


def normalized_days(values) -> DaySet:
    """Calendar days of stored values, deduplicated, order kept."""
    return DaySet(d for d in (to_calendar_day(v) for v in values) if d is not None)


@dataclass
class LockDelta:
    added: List[date] = field(default_factory=list)
    removed: List[date] = field(default_factory=list)
    active_changed: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.active_changed)


def apply_lock_delta(session: LockStoreSession, account: Account, result: LockCheckResult) -> LockDelta:
    """Merge evaluator output into ``account`` in place and return what changed.

    Persisted locked days not re-computed are removed only when their daily
    record now carries a deposit entry.
    """
    computed = normalized_days(result.locked_dates)
    persisted = normalized_days(account.locked_dates)

    delta = LockDelta()
    delta.added = [d for d in computed if d not in persisted]
    for day in persisted:
        if day in computed:
            continue
        stats = session.get_daily_stats(account.account_id, day)
        if stats is not None and stats.has_deposit():
            delta.removed.append(day)

    if delta.added or delta.removed:
        for day in delta.removed:
            persisted.discard(day)
        for day in delta.added:
            persisted.add(day)
        account.locked_dates = persisted.as_list()

    if list(result.active_dates) != list(account.active_dates):
        delta.active_changed = True
        account.active_dates = list(result.active_dates)
    return delta


class LockCheckService:
    def __init__(self, store: LockStore, *, clock: Clock | None = None, workers: int | None = None):
        self._store = store
        self._clock = clock or system_clock
        self._workers = workers or config.LOCK_CHECK_WORKERS
        self._account_locks = KeyedLock()

    def now(self) -> datetime:
        return business_now(self._clock)

    def check_account_lock_status(self, account_id: int) -> LockCheckResult:
        """Classify the account's window days; empty and not ok on store failure."""
        now = self.now()
        days = window_days(now)
        today = days[-1]
        result = LockCheckResult()
        try:
            with self._store.session() as session:
                for day in days:
                    stats = session.get_daily_stats(account_id, day)
                    state = classify_day(stats, day, today=today, now=now)
                    if state is DayLockState.LOCKED:
                        result.locked_dates.append(day)
                    elif state is DayLockState.ACTIVE:
                        result.active_dates.append(build_active_day(day, now))
        except StoreError as exc:
            logger.error("lock_check_failed account_id=%s error=%s", account_id, exc)
            return LockCheckResult(ok=False)
        return result

    def update_account_lock_state(self, account_id: int, result: LockCheckResult) -> Optional[Account]:
        """Reconcile persisted lock state; None when missing or on store failure."""
        _ok, account = self._update_logged(account_id, result)
        return account

    def _update_logged(self, account_id: int, result: LockCheckResult) -> Tuple[bool, Optional[Account]]:
        try:
            return True, self._reconcile(account_id, result)
        except StoreError as exc:
            logger.error("lock_update_failed account_id=%s error=%s", account_id, exc)
            return False, None

    def _reconcile(self, account_id: int, result: LockCheckResult) -> Optional[Account]:
        with self._store.session() as session:
            account = session.get_account(account_id, for_update=True)
            if account is None:
                return None
            delta = apply_lock_delta(session, account, result)
            if delta.changed:
                session.save_lock_state(account)

        if delta.added:
            logger.info(
                "lock_dates_added account_id=%s username=%s count=%s dates=%s",
                account_id, account.username, len(delta.added), [d.isoformat() for d in delta.added],
            )
        if delta.removed:
            logger.info(
                "lock_dates_removed account_id=%s username=%s count=%s dates=%s reason=deposit_recorded",
                account_id, account.username, len(delta.removed), [d.isoformat() for d in delta.removed],
            )
        if delta.active_changed:
            logger.info(
                "active_dates_changed account_id=%s username=%s active=%s",
                account_id, account.username, [a.to_dict() for a in account.active_dates],
            )
        return account

    def _check_and_update(self, account_id: int) -> Tuple[bool, Optional[Account]]:
        # The keyed lock serializes an on-demand check with a sweep of the same account.
        try:
            with self._account_locks.hold(account_id):
                result = self.check_account_lock_status(account_id)
                if not result.ok:
                    return False, None
                return self._update_logged(account_id, result)
        except Exception:
            logger.error("lock_check_failed account_id=%s", account_id, exc_info=True)
            return False, None

    def check_and_update_account(self, account_id: int) -> LockStatus:
        """On-demand path: reconcile one account and return its persisted lock state."""
        _ok, account = self._check_and_update(account_id)
        if account is None:
            return LockStatus()
        return LockStatus(
            locked_dates=sorted(normalized_days(account.locked_dates)),
            active_dates=list(account.active_dates),
        )

    def check_all_accounts(self) -> SweepSummary:
        """Sweep path: reconcile every account, returning aggregate counters."""
        logger.info("lock_sweep_started at=%s workers=%s", self.now().isoformat(), self._workers)
        summary = SweepSummary()
        try:
            with self._store.session() as session:
                account_ids = [account.account_id for account in session.list_accounts()]
        except StoreError as exc:
            logger.error("lock_sweep_failed error=%s", exc)
            return summary

        if self._workers > 1 and len(account_ids) > 1:
            with ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="lock-check") as pool:
                outcomes = list(pool.map(self._check_and_update, account_ids))
        else:
            outcomes = [self._check_and_update(account_id) for account_id in account_ids]

        for ok, account in outcomes:
            summary.checked += 1
            if not ok:
                summary.failed += 1
            elif account is not None and account.locked_dates:
                summary.locked += 1

        logger.info(
            "lock_sweep_completed checked=%s locked=%s failed=%s",
            summary.checked, summary.locked, summary.failed,
        )
        return summary
