"""Paged order queries over a scrollable server-side cursor.

The total match count is obtained by walking the cursor to its last row,
so a fetch costs O(total) rows on the server side no matter how small the
page is. Swap in a dedicated ``COUNT(*)`` query if that becomes a problem.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import psycopg  # pylint: disable=import-error
from psycopg.rows import dict_row  # pylint: disable=import-error

from .config import (
    ORDER_SORT_SQL,
    ORDER_TABLE,
    fetch_batch_size,
    fetch_timeout_ms,
    slow_fetch_threshold_ms,
)
from .errors import StorageError
from .filter_sql import Condition, describe_condition, render_where
from .order_models import ORDER_COLUMNS, FetchResult, OrderRecord

logger = logging.getLogger(__name__)


def build_order_query(condition: Condition) -> tuple[str, list[Any]]:
    """Return the ordered order header query for ``condition``."""
    where_sql, params = render_where(condition)
    columns = ", ".join(ORDER_COLUMNS)
    query = f"SELECT {columns} FROM {ORDER_TABLE}{where_sql} ORDER BY {ORDER_SORT_SQL}"
    return query, params


def _count_remaining(cursor, batch_size: int) -> int:
    remaining = 0
    while True:
        rows = cursor.fetchmany(batch_size)
        if not rows:
            return remaining
        remaining += len(rows)


class PagedQueryExecutor:
    """Run order list conditions against one open connection."""

    def __init__(
        self,
        conn: "psycopg.Connection",
        *,
        batch_size: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        self._conn = conn
        self._batch_size = batch_size if batch_size is not None else fetch_batch_size()
        self._timeout_ms = timeout_ms if timeout_ms is not None else fetch_timeout_ms()

    def fetch(self, condition: Condition, page_size: int, page_index: int) -> FetchResult:
        """Return the requested window of orders and the total match count."""
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        if page_index < 0:
            raise ValueError("page_index must not be negative")
        query, params = build_order_query(condition)
        offset = page_index * page_size
        name = f"order_list_{uuid.uuid4().hex[:12]}"
        stage = "open"
        start = time.perf_counter()
        try:
            self._apply_deadline()
            with self._conn.cursor(name=name, scrollable=True, row_factory=dict_row) as cursor:
                cursor.execute(query, params)
                stage = "scroll"
                cursor.scroll(offset, mode="absolute")
                rows = cursor.fetchmany(page_size)
                total = self._walk_to_end(cursor, offset, len(rows))
                stage = "close"
        except psycopg.Error as exc:
            logger.error(
                "Order list fetch failed at %s: %s condition=%s",
                stage,
                exc,
                describe_condition(condition),
            )
            raise StorageError("Order list fetch failed", stage=stage) from exc
        self._log_timing(start, condition, total)
        return FetchResult(page=[OrderRecord.from_row(row) for row in rows], total=total)

    def _walk_to_end(self, cursor, offset: int, fetched: int) -> int:
        if fetched:
            return offset + fetched + _count_remaining(cursor, self._batch_size)
        # The window was past the end (or the result is empty); count from the top.
        cursor.scroll(0, mode="absolute")
        return _count_remaining(cursor, self._batch_size)

    def _apply_deadline(self) -> None:
        if self._timeout_ms <= 0:
            return
        self._conn.execute(
            "SELECT set_config('statement_timeout', %s, true)",
            (f"{self._timeout_ms}ms",),
        )

    @staticmethod
    def _log_timing(start: float, condition: Condition, total: int) -> None:
        elapsed_ms = (time.perf_counter() - start) * 1000
        slow_ms = slow_fetch_threshold_ms()
        if slow_ms is not None and elapsed_ms >= slow_ms:
            logger.warning(
                "Slow order list fetch: %.1fms total=%d condition=%s",
                elapsed_ms,
                total,
                describe_condition(condition),
            )
        else:
            logger.debug("Order list fetch: %.1fms total=%d", elapsed_ms, total)
