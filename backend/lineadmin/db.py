import contextlib
import psycopg2
from psycopg2 import pool
from lineadmin import config

_connection_pool: pool.ThreadedConnectionPool | None = None


def init_pool():
    global _connection_pool
    if _connection_pool is None:
        # Threaded: API handlers and the sweep thread pool share connections.
        _connection_pool = psycopg2.pool.ThreadedConnectionPool(
            minconn=config.DB_POOL_MIN,
            maxconn=config.DB_POOL_MAX,
            dsn=config.DATABASE_URL,
        )
    return _connection_pool


def close_pool():
    global _connection_pool
    if _connection_pool:
        _connection_pool.closeall()
        _connection_pool = None


@contextlib.contextmanager
def get_conn():
    if _connection_pool is None:
        raise RuntimeError("DB pool not initialized")
    conn = _connection_pool.getconn()
    try:
        yield conn
    finally:
        # Ensure no transaction remains open; a pending FOR UPDATE would block the next sweep.
        try:
            conn.rollback()
        except psycopg2.Error:
            pass
        _connection_pool.putconn(conn)
