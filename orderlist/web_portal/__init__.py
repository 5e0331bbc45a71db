"""Order list portal: session filter state, condition building and paging."""

from __future__ import annotations

from .errors import ParseError, StorageError
from .filter_sql import ConditionList, EqualsExpr, Operator, render_where
from .order_catalog import CATALOG, FILTER_CODES, STATUS_CODES, TYPE_CODES, ParameterCatalog
from .order_conditions import ConditionBuilder, build_order_condition
from .order_list_state import (
    FilterState,
    ListMode,
    PageChange,
    SelectionChange,
    UpdateOutcome,
    command_from_params,
)
from .order_models import FetchResult, OrderListPage, OrderRecord
from .order_paging import PagedQueryExecutor
from .state_store import FilterStateStore

__all__ = [
    "CATALOG",
    "FILTER_CODES",
    "STATUS_CODES",
    "TYPE_CODES",
    "ConditionBuilder",
    "ConditionList",
    "EqualsExpr",
    "FetchResult",
    "FilterState",
    "FilterStateStore",
    "ListMode",
    "Operator",
    "OrderListPage",
    "OrderRecord",
    "PageChange",
    "PagedQueryExecutor",
    "ParameterCatalog",
    "ParseError",
    "SelectionChange",
    "StorageError",
    "UpdateOutcome",
    "build_order_condition",
    "command_from_params",
    "render_where",
]
