"""Database helpers for the worker."""

import logging
from contextlib import contextmanager
from typing import Optional

from psycopg2 import pool

from hydrator.core.config import ConfigError, get_settings

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None


def init_pool(minconn: int = 1, maxconn: int = 2) -> pool.SimpleConnectionPool:
    """Initialise and return the shared pool; hydration holds one connection at a time."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise ConfigError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


def close_pool() -> None:
    global _connection_pool
    if _connection_pool is not None:
        _connection_pool.closeall()
        _connection_pool = None
        logger.info("Database connection pool closed")


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


@contextmanager
def transaction(cursor_factory=None):
    """Yield a cursor on a pooled connection inside one transaction.

    Commits when the block completes and rolls back on any exception, which is
    re-raised. Callers signal "nothing to write" by raising their own exception.
    """
    with get_connection() as conn:
        try:
            with conn.cursor(cursor_factory=cursor_factory) as cur:
                yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
