import contextlib
import copy
import os
import sys
import threading
from datetime import date, datetime, timedelta
from pathlib import Path

import psycopg2
import pytest
from psycopg2 import OperationalError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lineadmin.constants.lock_config import BUSINESS_TZ  # noqa: E402
from lineadmin.models import Account, ActiveDay, DailyStats  # noqa: E402
from lineadmin.services.lock_check_service import LockCheckService  # noqa: E402
from lineadmin.services.lock_store import StoreError  # noqa: E402


def bkk(year, month, day, hour=0, minute=0, second=0) -> datetime:
    """Aware datetime in the business timezone."""
    return datetime(year, month, day, hour, minute, second, tzinfo=BUSINESS_TZ)


class FrozenClock:
    """Pinned time source; tests move it explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class _InMemorySession:
    def __init__(self, store: "InMemoryLockStore"):
        self._store = store
        self.pending: dict[int, Account] = {}

    def list_accounts(self):
        if self._store.fail_list:
            raise StoreError("list failed")
        return [copy.deepcopy(a) for _, a in sorted(self._store.accounts.items())]

    def get_account(self, account_id, *, for_update=False):
        if account_id in self._store.fail_load:
            raise StoreError("load failed")
        account = self._store.accounts.get(account_id)
        return copy.deepcopy(account) if account else None

    def get_daily_stats(self, account_id, day):
        self._store.lookups.append((account_id, day))
        self._store.events.append(("lookup", account_id))
        if self._store.on_lookup is not None:
            self._store.on_lookup(account_id, day)
        if account_id in self._store.fail_lookup:
            raise StoreError("lookup failed")
        stats = self._store.stats.get((account_id, day))
        return copy.deepcopy(stats) if stats else None

    def save_lock_state(self, account):
        if account.account_id in self._store.fail_save:
            raise StoreError("save failed")
        self.pending[account.account_id] = copy.deepcopy(account)


class InMemoryLockStore:
    """Dict-backed store with the same session/transaction shape as PostgresLockStore."""

    def __init__(self):
        self.accounts: dict[int, Account] = {}
        self.stats: dict[tuple[int, date], DailyStats] = {}
        self.saves = 0
        self.lookups: list[tuple[int, date]] = []
        self.events: list[tuple[str, int]] = []
        # Called inside get_daily_stats; tests use it to block or fail a lookup.
        self.on_lookup = None
        self.fail_list = False
        self.fail_load: set[int] = set()
        self.fail_lookup: set[int] = set()
        self.fail_save: set[int] = set()
        self._lock = threading.RLock()

    @contextlib.contextmanager
    def session(self):
        # Sessions run concurrently; only the commit is atomic.
        session = _InMemorySession(self)
        yield session
        with self._lock:
            for account_id, account in session.pending.items():
                self.accounts[account_id] = account
                self.saves += 1
                self.events.append(("commit", account_id))

    def add_account(self, account_id, username=None, *, locked_dates=None, active_dates=None) -> Account:
        account = Account(
            account_id=account_id,
            username=username or f"user{account_id}",
            locked_dates=list(locked_dates or []),
            active_dates=list(active_dates or []),
        )
        self.accounts[account_id] = account
        return account

    def put_stats(self, account_id, day, **fields) -> DailyStats:
        stats = DailyStats(account_id=account_id, date=day, **fields)
        self.stats[(account_id, day)] = stats
        return stats

    def set_deposit(self, account_id, day, count, amount) -> None:
        stats = self.stats[(account_id, day)]
        stats.deposit_count = count
        stats.deposit_amount = amount

    def locked(self, account_id) -> list[date]:
        return list(self.accounts[account_id].locked_dates)

    def active(self, account_id) -> list[ActiveDay]:
        return list(self.accounts[account_id].active_dates)


@pytest.fixture
def store():
    return InMemoryLockStore()


@pytest.fixture
def clock():
    return FrozenClock(bkk(2024, 5, 11, 9, 0, 0))


@pytest.fixture
def service(store, clock):
    return LockCheckService(store, clock=clock, workers=1)


def _running_in_docker() -> bool:
    # Common indicator inside Linux containers.
    if os.path.exists("/.dockerenv"):
        return True
    # Fallback heuristic for some container runtimes.
    cgroup_path = "/proc/1/cgroup"
    if os.path.exists(cgroup_path):
        try:
            with open(cgroup_path, "r", encoding="utf-8") as f:
                content = f.read()
            return "docker" in content or "containerd" in content
        except OSError:
            return False
    return False


def _with_connect_timeout(url: str, seconds: int = 3) -> str:
    # For libpq/psycopg2, connect_timeout can be specified as a URI query param.
    if "connect_timeout=" in url:
        return url
    joiner = "&" if "?" in url else "?"
    return f"{url}{joiner}connect_timeout={seconds}"


@pytest.fixture(scope="session")
def db_url():
    """Database URL for store tests.

    - If DATABASE_URL is set, always respect it.
    - If running inside Docker, default to the compose service host `db`.
    - Otherwise (local machine), default to `localhost`.
    """
    env_url = os.getenv("DATABASE_URL")
    if env_url:
        return _with_connect_timeout(env_url)
    host = "db" if _running_in_docker() else "localhost"
    return _with_connect_timeout(f"postgresql://lineadmin:lineadmin@{host}:5432/lineadmin")


@pytest.fixture
def db_conn(db_url):
    """Connection to a prepared, emptied lock check schema; skips without a DB."""
    from lineadmin.services.lock_store import ensure_schema

    try:
        conn = psycopg2.connect(db_url, connect_timeout=3)
    except OperationalError as exc:  # pragma: no cover - skip if DB unavailable
        pytest.skip(f"database not reachable: {exc}")

    try:
        with conn.cursor() as cur:
            cur.execute("SET lock_timeout = '2s'")
            ensure_schema(cur)
            cur.execute("TRUNCATE TABLE daily_stats, accounts RESTART IDENTITY CASCADE")
        conn.commit()
    except psycopg2.Error as exc:  # pragma: no cover
        conn.close()
        pytest.skip(f"database reset skipped (DB busy/locked): {exc}")
    yield conn
    conn.close()
