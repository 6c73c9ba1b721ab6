"""Lock state store.

PostgreSQL-backed account and daily-stats access for the lock check.
A session is one transaction: the account row read ``FOR UPDATE``, the
deposit lookups and the conditional write commit or roll back together.
"""

import contextlib
import json
import logging
from datetime import date
from typing import Any, Callable, ContextManager, Iterator, List, Optional, Protocol

import psycopg2
from psycopg2.extras import Json

from lineadmin import db
from lineadmin.models import Account, ActiveDay, DailyStats
from lineadmin.utils.sql_builders import _apply_job_timeouts


logger = logging.getLogger("lineadmin.store")


class StoreError(RuntimeError):
    """Account or daily-stats store unavailable or returned unusable data."""


class LockStoreSession(Protocol):
    def list_accounts(self) -> List[Account]:
        ...

    def get_account(self, account_id: int, *, for_update: bool = False) -> Optional[Account]:
        ...

    def get_daily_stats(self, account_id: int, day: date) -> Optional[DailyStats]:
        ...

    def save_lock_state(self, account: Account) -> None:
        ...


class LockStore(Protocol):
    def session(self) -> ContextManager[LockStoreSession]:
        ...


_ACCOUNT_COLUMNS = "account_id, username, locked_dates, active_dates"


def _row_to_account(row) -> Account:
    account_id, username, locked_dates, active_dates = row
    if isinstance(active_dates, str):
        active_dates = json.loads(active_dates)
    active = []
    # Unparseable entries are skipped; reconcile rewrites the whole list.
    for item in active_dates or []:
        try:
            active.append(ActiveDay.from_dict(item))
        except (AttributeError, TypeError, ValueError) as exc:
            logger.warning("active_dates_entry_invalid account_id=%s entry=%r error=%s", account_id, item, exc)
    return Account(
        account_id=int(account_id),
        username=username,
        locked_dates=list(locked_dates or []),
        active_dates=active,
    )


def _row_to_daily_stats(row) -> DailyStats:
    (
        account_id,
        day,
        registrations_count,
        friends_added_count,
        groups_created_count,
        messages_sent_count,
        deposit_count,
        deposit_amount,
    ) = row
    return DailyStats(
        account_id=int(account_id),
        date=day,
        registrations_count=int(registrations_count or 0),
        friends_added_count=int(friends_added_count or 0),
        groups_created_count=int(groups_created_count or 0),
        messages_sent_count=int(messages_sent_count or 0),
        deposit_count=int(deposit_count) if deposit_count is not None else None,
        deposit_amount=float(deposit_amount) if deposit_amount is not None else None,
    )


class PostgresLockSession:
    def __init__(self, cur):
        self._cur = cur

    def list_accounts(self) -> List[Account]:
        self._cur.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY account_id ASC")
        return [_row_to_account(row) for row in self._cur.fetchall()]

    def get_account(self, account_id: int, *, for_update: bool = False) -> Optional[Account]:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id=%s"
        if for_update:
            sql += " FOR UPDATE"
        self._cur.execute(sql, (account_id,))
        row = self._cur.fetchone()
        return _row_to_account(row) if row else None

    def get_daily_stats(self, account_id: int, day: date) -> Optional[DailyStats]:
        self._cur.execute(
            """
            SELECT account_id,
                   date,
                   registrations_count,
                   friends_added_count,
                   groups_created_count,
                   messages_sent_count,
                   deposit_count,
                   deposit_amount
              FROM daily_stats
             WHERE account_id=%s AND date=%s
            """,
            (account_id, day),
        )
        row = self._cur.fetchone()
        return _row_to_daily_stats(row) if row else None

    def save_lock_state(self, account: Account) -> None:
        self._cur.execute(
            """
            UPDATE accounts
               SET locked_dates=%s::date[],
                   active_dates=%s,
                   updated_at=NOW()
             WHERE account_id=%s
            """,
            (
                list(account.locked_dates),
                Json([item.to_dict() for item in account.active_dates]),
                account.account_id,
            ),
        )


class PostgresLockStore:
    def __init__(self, conn_factory: Callable[[], ContextManager[Any]] | None = None):
        self._conn_factory = conn_factory or db.get_conn

    @contextlib.contextmanager
    def session(self) -> Iterator[PostgresLockSession]:
        try:
            with self._conn_factory() as conn:
                cur = conn.cursor()
                _apply_job_timeouts(cur)
                yield PostgresLockSession(cur)
                conn.commit()
        except psycopg2.Error as exc:
            logger.warning("store_error pgcode=%s error=%s", getattr(exc, "pgcode", None), exc)
            raise StoreError(str(exc)) from exc


def ensure_schema(cur):
    """Best-effort DDL for the tables the lock check reads and writes."""
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS accounts (
            account_id BIGSERIAL PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            locked_dates DATE[] NOT NULL DEFAULT '{}',
            active_dates JSONB NOT NULL DEFAULT '[]'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS daily_stats (
            id BIGSERIAL PRIMARY KEY,
            account_id BIGINT NOT NULL REFERENCES accounts(account_id) ON DELETE CASCADE,
            date DATE NOT NULL,
            registrations_count INTEGER NOT NULL DEFAULT 0 CHECK (registrations_count >= 0),
            friends_added_count INTEGER NOT NULL DEFAULT 0 CHECK (friends_added_count >= 0),
            groups_created_count INTEGER NOT NULL DEFAULT 0 CHECK (groups_created_count >= 0),
            messages_sent_count INTEGER NOT NULL DEFAULT 0 CHECK (messages_sent_count >= 0),
            deposit_count INTEGER CHECK (deposit_count >= 0),
            deposit_amount NUMERIC(14, 2) CHECK (deposit_amount >= 0),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            UNIQUE (account_id, date),
            CHECK ((deposit_count IS NULL) = (deposit_amount IS NULL))
        );
        """
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_daily_stats_account_date ON daily_stats (account_id, date DESC)")
