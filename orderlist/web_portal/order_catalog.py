"""Selection key to domain code tables for the order list filters."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

STATUS_CODES: Mapping[str, str] = MappingProxyType(
    {
        "viewcompleted": "ORDER_COMPLETED",
        "viewcancelled": "ORDER_CANCELLED",
        "viewrejected": "ORDER_REJECTED",
        "viewapproved": "ORDER_APPROVED",
        "viewcreated": "ORDER_CREATED",
        "viewprocessing": "ORDER_PROCESSING",
        "viewsent": "ORDER_SENT",
    }
)

TYPE_CODES: Mapping[str, str] = MappingProxyType(
    {
        "view_SALES_ORDER": "SALES_ORDER",
        "view_PURCHASE_ORDER": "PURCHASE_ORDER",
    }
)

FILTER_CODES: Mapping[str, str] = MappingProxyType(
    {
        key: key
        for key in (
            "filterInventoryProblems",
            "filterAuthProblems",
            "filterPartiallyReceivedPOs",
            "filterPOsOpenPastTheirETA",
            "filterPOsWithRejectedItems",
        )
    }
)

DEFAULT_STATUS_KEYS = frozenset({"viewcreated", "viewprocessing", "viewapproved"})
DEFAULT_TYPE_KEYS = frozenset({"view_SALES_ORDER"})
DEFAULT_FILTER_KEYS: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ParameterCatalog:
    """The three selection dimensions of the order list."""

    status: Mapping[str, str]
    type: Mapping[str, str]
    filter: Mapping[str, str]


CATALOG = ParameterCatalog(status=STATUS_CODES, type=TYPE_CODES, filter=FILTER_CODES)
