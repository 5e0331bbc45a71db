"""Turn an order list state into a condition tree for the order store."""

from __future__ import annotations

import logging
from typing import Callable, Mapping

from .config import legacy_filter_selection
from .filter_sql import ConditionList, EqualsExpr, all_of, any_of
from .order_list_state import FilterState

logger = logging.getLogger(__name__)

STATUS_FIELD = "statusId"
TYPE_FIELD = "orderTypeId"
FILTER_FIELD = "orderFiltersStateId"
FACILITY_FIELD = "originFacilityId"


def _selected_codes(codes: Mapping[str, str], selected: Callable[[str], bool]) -> list[str]:
    return [code for key, code in codes.items() if selected(key)]


class ConditionBuilder:
    """Build the order store condition for a list state.

    The status, type and filter groups are applied together or not at all:
    if any one of them has no selection, none of the three restricts the
    result. The facility restriction is applied independently.
    """

    def __init__(self, *, legacy_filter: bool | None = None) -> None:
        # Legacy mode decides filter membership with the type selections, which
        # never hold filter keys, so the filter group (and with it all three
        # dimensions) is never applied.
        if legacy_filter is None:
            legacy_filter = legacy_filter_selection()
        self.legacy_filter = legacy_filter

    def build(self, state: FilterState, facility: str | None = None) -> ConditionList:
        """Return the top-level AND condition for ``state``."""
        catalog = state.catalog
        status_codes = _selected_codes(catalog.status, state.has_status)
        type_codes = _selected_codes(catalog.type, state.has_type)
        filter_test = state.has_type if self.legacy_filter else state.has_filter
        filter_codes = _selected_codes(catalog.filter, filter_test)

        conditions: list = []
        if status_codes and type_codes and filter_codes:
            conditions.extend(
                (
                    any_of(STATUS_FIELD, status_codes),
                    any_of(TYPE_FIELD, type_codes),
                    any_of(FILTER_FIELD, filter_codes),
                )
            )
        else:
            logger.debug(
                "Order list dimensions not applied (status=%d type=%d filter=%d)",
                len(status_codes),
                len(type_codes),
                len(filter_codes),
            )
        if facility is not None:
            conditions.append(EqualsExpr(FACILITY_FIELD, facility))
        return all_of(conditions)


def build_order_condition(state: FilterState, facility: str | None = None) -> ConditionList:
    """Build the condition for ``state`` with the configured filter policy."""
    return ConditionBuilder().build(state, facility)
