"""Configuration helpers and constants for the order list portal."""

from __future__ import annotations

from ..core.env_utils import env_bool, env_float, env_int, env_int_fallback, env_str

_env_bool = env_bool
_env_float = env_float
_env_int = env_int

DEFAULT_VIEW_SIZE = 10
MAX_VIEW_SIZE = 500
DEFAULT_FETCH_BATCH = 500
DEFAULT_SESSION_TTL_SEC = 1800

INCLUDE_MARKER = "Y"
CHANGE_MODE_PARAM = "changeStatusAndTypeState"
VIEW_SIZE_PARAM = "viewSize"
VIEW_INDEX_PARAM = "viewIndex"
FACILITY_PARAM = "facilityId"
SESSION_KEY = "__ORDER_LIST_STATUS__"

ORDER_TABLE = "order_header"
ORDER_FIELD_COLUMNS = {
    "orderId": "order_id",
    "statusId": "status_id",
    "orderTypeId": "order_type_id",
    "originFacilityId": "origin_facility_id",
    "orderDate": "order_date",
    "orderFiltersStateId": "order_filters_state_id",
}
ORDER_SORT_SQL = "order_date DESC, order_id DESC"


def default_view_size() -> int:
    """Return the configured page size for new list states."""
    return env_int_fallback("ORDER_LIST_VIEW_SIZE", DEFAULT_VIEW_SIZE, minimum=1)


def max_view_size() -> int:
    """Return the largest page size a client may request."""
    return env_int_fallback("ORDER_LIST_MAX_VIEW_SIZE", MAX_VIEW_SIZE, minimum=1)


def legacy_filter_selection() -> bool:
    """Return True to drive the filter group from the type selections."""
    return env_bool("ORDER_LIST_LEGACY_FILTER_SELECTION", False)


def fetch_timeout_ms() -> int:
    """Return the per-fetch statement timeout in ms (0 disables it)."""
    return env_int("ORDER_LIST_FETCH_TIMEOUT_MS", 0, minimum=0)


def fetch_batch_size() -> int:
    """Return the row batch used while walking the cursor for a count."""
    return env_int_fallback("ORDER_LIST_FETCH_BATCH", DEFAULT_FETCH_BATCH, minimum=1)


def slow_fetch_threshold_ms() -> float | None:
    """Return the slow fetch threshold (ms) if configured."""
    value = env_float("ORDER_LIST_SLOW_FETCH_MS", 0.0)
    return value if value > 0 else None


def session_ttl_sec() -> int:
    """Return how long an idle session state is kept (0 keeps it forever)."""
    return env_int("ORDER_LIST_SESSION_TTL_SEC", DEFAULT_SESSION_TTL_SEC, minimum=0)


def default_facility() -> str | None:
    """Return the facility applied when a request does not name one."""
    return env_str("ORDER_LIST_DEFAULT_FACILITY")
