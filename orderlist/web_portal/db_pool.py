"""Database connection pool helpers for the order list portal."""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from typing import Any, Iterator

import psycopg  # pylint: disable=import-error
from psycopg_pool import ConnectionPool, PoolTimeout  # pylint: disable=import-error

from .config import _env_bool, _env_float, _env_int
from .errors import StorageError

logger = logging.getLogger(__name__)

_DB_POOL: ConnectionPool | None = None
_DB_POOL_LOCK = threading.Lock()


def _db_pool_enabled() -> bool:
    return _env_bool("WEB_DB_POOL_ENABLE", True)


def _db_pool_sizes() -> tuple[int, int]:
    min_size = _env_int("WEB_DB_POOL_MIN", 1, minimum=0)
    max_size = _env_int("WEB_DB_POOL_MAX", 8, minimum=1)
    return min_size, max(max_size, min_size)


def _db_pool_timeout() -> float:
    return _env_float("WEB_DB_POOL_TIMEOUT", 3.0, minimum=0.1)


def _get_db_pool(db_url: str | None) -> ConnectionPool | None:
    global _DB_POOL  # pylint: disable=global-statement
    if not db_url or not _db_pool_enabled():
        return None
    if _DB_POOL is not None:
        return _DB_POOL
    with _DB_POOL_LOCK:
        if _DB_POOL is not None:
            return _DB_POOL
        min_size, max_size = _db_pool_sizes()
        try:
            _DB_POOL = ConnectionPool(
                db_url,
                min_size=min_size,
                max_size=max_size,
                timeout=_db_pool_timeout(),
                open=True,
            )
        except psycopg.Error as exc:
            logger.warning("DB pool init failed; falling back to direct connections: %s", exc)
            _DB_POOL = None
    return _DB_POOL


def close_db_pool() -> None:
    """Close and forget the shared pool, if one was opened."""
    global _DB_POOL  # pylint: disable=global-statement
    with _DB_POOL_LOCK:
        pool, _DB_POOL = _DB_POOL, None
    if pool is not None:
        pool.close()


@contextmanager
def _managed_connection(conn: "psycopg.Connection") -> Iterator["psycopg.Connection"]:
    """Run the block in one transaction; roll back if it raises."""
    prev_autocommit = conn.autocommit
    # Named cursors only live inside a transaction.
    conn.autocommit = False
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.autocommit = prev_autocommit


@contextmanager
def _pool_connection(pool: ConnectionPool) -> Iterator["psycopg.Connection"]:
    try:
        with pool.connection() as conn:
            with _managed_connection(conn) as managed:
                yield managed
    except PoolTimeout as exc:
        logger.warning("DB pool exhausted: %s", exc)
        raise StorageError(
            "Database connection pool exhausted; try again shortly.",
            stage="connect",
        ) from exc


@contextmanager
def _direct_connection(
    db_url: str,
    connect_timeout: int | None,
) -> Iterator["psycopg.Connection"]:
    connect_kwargs: dict[str, Any] = {}
    if connect_timeout is not None:
        connect_kwargs["connect_timeout"] = connect_timeout
    conn = psycopg.connect(db_url, **connect_kwargs)
    try:
        with _managed_connection(conn) as managed:
            yield managed
    finally:
        conn.close()


@contextmanager
def db_connection(
    connect_timeout: int | None = None,
    force_direct: bool = False,
) -> Iterator["psycopg.Connection"]:
    """Yield a transactional connection from the pool or a direct connect."""
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise RuntimeError("DATABASE_URL is not set.")
    pool = None if force_direct else _get_db_pool(db_url)
    if pool is not None:
        with _pool_connection(pool) as conn:
            yield conn
        return
    with _direct_connection(db_url, connect_timeout) as conn:
        yield conn
