"""Load an order list page for a session state."""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Mapping

import psycopg  # pylint: disable=import-error

from .db_pool import db_connection
from .errors import StorageError
from .order_conditions import ConditionBuilder
from .order_list_state import FilterState, UpdateOutcome, command_from_params
from .order_models import OrderListPage
from .order_paging import PagedQueryExecutor

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], AbstractContextManager]


def apply_request(state: FilterState, params: Mapping[str, Any]) -> UpdateOutcome:
    """Apply whatever update the request parameters encode."""
    outcome = state.apply_update(command_from_params(params, state.catalog))
    if outcome is not UpdateOutcome.NO_CHANGE:
        logger.debug("Order list update %s\n%s", outcome.value, state.describe())
    return outcome


def load_order_page(
    state: FilterState,
    facility: str | None = None,
    *,
    connection_factory: ConnectionFactory = db_connection,
    builder: ConditionBuilder | None = None,
) -> OrderListPage:
    """Fetch the state's current page and refresh its known total.

    Storage failures come back as an ``OrderListPage`` with ``error`` set;
    the state's total is left untouched in that case.
    """
    builder = builder or ConditionBuilder()
    condition = builder.build(state, facility)
    try:
        with connection_factory() as conn:
            result = PagedQueryExecutor(conn).fetch(
                condition,
                state.page_size,
                state.page_index,
            )
    except StorageError as exc:
        return _failed_page(state, str(exc))
    except psycopg.Error as exc:
        logger.error("Order list connection failed: %s", exc)
        return _failed_page(state, str(StorageError("Order store unavailable", stage="connect")))
    state.record_total(result.total)
    return OrderListPage(
        orders=result.page,
        total=result.total,
        view_size=state.page_size,
        view_index=state.page_index,
        has_previous=state.has_previous(),
        has_next=state.has_next(),
        has_all_status=state.has_all_status(),
    )


def _failed_page(state: FilterState, error: str) -> OrderListPage:
    return OrderListPage(
        view_size=state.page_size,
        view_index=state.page_index,
        has_previous=state.has_previous(),
        has_all_status=state.has_all_status(),
        error=error,
    )
