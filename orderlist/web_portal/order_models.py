"""Order list data models and result containers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

ORDER_COLUMNS = (
    "order_id",
    "status_id",
    "order_type_id",
    "origin_facility_id",
    "order_date",
    "order_filters_state_id",
)


def _iso(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class OrderRecord:  # pylint: disable=too-many-instance-attributes
    """One row of the order header listing."""

    order_id: str
    status_id: str | None
    order_type_id: str | None
    origin_facility_id: str | None
    order_date: datetime | None
    order_filters_state_id: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "OrderRecord":
        """Build a record from a dict row."""
        return cls(
            order_id=row["order_id"],
            status_id=row.get("status_id"),
            order_type_id=row.get("order_type_id"),
            origin_facility_id=row.get("origin_facility_id"),
            order_date=row.get("order_date"),
            order_filters_state_id=row.get("order_filters_state_id"),
        )

    def as_payload(self) -> dict[str, Any]:
        """Serialize to the camel-cased JSON payload."""
        return {
            "orderId": self.order_id,
            "statusId": self.status_id,
            "orderTypeId": self.order_type_id,
            "originFacilityId": self.origin_facility_id,
            "orderDate": _iso(self.order_date),
            "orderFiltersStateId": self.order_filters_state_id,
        }


@dataclass(frozen=True)
class FetchResult:
    """One page of orders and the total match count."""

    page: list[OrderRecord]
    total: int


@dataclass(frozen=True)
class OrderListPage:
    """Outcome of loading the order list for a session."""

    orders: list[OrderRecord] = field(default_factory=list)
    total: int = 0
    view_size: int = 0
    view_index: int = 0
    has_previous: bool = False
    has_next: bool = False
    has_all_status: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Return True when the page was loaded without a storage failure."""
        return self.error is None

    def as_payload(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "orders": [order.as_payload() for order in self.orders],
            "total": self.total,
            "view_size": self.view_size,
            "view_index": self.view_index,
            "has_previous": self.has_previous,
            "has_next": self.has_next,
            "has_all_status": self.has_all_status,
        }
