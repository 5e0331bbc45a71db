"""Per-session order list state: filter selections and paging position.

The state has three selection dimensions (order status, order type and
ad-hoc business filters) plus a pagination cursor. It changes only through
``FilterState.apply_update``. Callers build a command with
``command_from_params`` from the flat request parameters.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Union

from .config import (
    CHANGE_MODE_PARAM,
    INCLUDE_MARKER,
    VIEW_INDEX_PARAM,
    VIEW_SIZE_PARAM,
    default_view_size,
)
from .errors import ParseError
from .order_catalog import (
    CATALOG,
    DEFAULT_FILTER_KEYS,
    DEFAULT_STATUS_KEYS,
    DEFAULT_TYPE_KEYS,
    ParameterCatalog,
)
from .order_limits import has_value, parse_page_change

logger = logging.getLogger(__name__)


class ListMode(str, enum.Enum):
    """Where a state sits in the default/filtered/paginated lifecycle."""

    DEFAULT = "default"
    FILTERED = "filtered"
    PAGINATED = "paginated"


class UpdateOutcome(str, enum.Enum):
    """Result of applying one update command."""

    SELECTION_APPLIED = "selection_applied"
    PAGE_APPLIED = "page_applied"
    PAGE_REJECTED = "page_rejected"
    NO_CHANGE = "no_change"


@dataclass(frozen=True)
class SelectionChange:
    """Replace all three selection maps and rewind to the first page."""

    status_choices: Mapping[str, Any] = field(default_factory=dict)
    type_choices: Mapping[str, Any] = field(default_factory=dict)
    filter_choices: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PageChange:
    """Move to a new page size/index; values are parsed on apply."""

    page_size: Any
    page_index: Any


Command = Union[SelectionChange, PageChange]


def _is_included(raw: Any) -> bool:
    if raw is True:
        return True
    return isinstance(raw, str) and raw == INCLUDE_MARKER


def _choices_for(params: Mapping[str, Any], keys) -> dict[str, Any]:
    return {key: params[key] for key in keys if key in params}


def command_from_params(
    params: Mapping[str, Any],
    catalog: ParameterCatalog = CATALOG,
) -> Command | None:
    """Pick the update command encoded in flat request parameters.

    ``changeStatusAndTypeState=Y`` selects a selection change. Otherwise a
    page change is produced only when both ``viewSize`` and ``viewIndex``
    are present. Anything else yields ``None``.
    """
    if params.get(CHANGE_MODE_PARAM) == INCLUDE_MARKER:
        return SelectionChange(
            status_choices=_choices_for(params, catalog.status),
            type_choices=_choices_for(params, catalog.type),
            filter_choices=_choices_for(params, catalog.filter),
        )
    raw_size = params.get(VIEW_SIZE_PARAM)
    raw_index = params.get(VIEW_INDEX_PARAM)
    if has_value(raw_size) and has_value(raw_index):
        return PageChange(page_size=raw_size, page_index=raw_index)
    return None


class FilterState:
    """Mutable list state owned by a single session."""

    def __init__(
        self,
        *,
        page_size: int | None = None,
        catalog: ParameterCatalog = CATALOG,
    ) -> None:
        if page_size is None:
            page_size = default_view_size()
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.catalog = catalog
        self.page_size = page_size
        self.page_index = 0
        self.status_selections = {key: key in DEFAULT_STATUS_KEYS for key in catalog.status}
        self.type_selections = {key: key in DEFAULT_TYPE_KEYS for key in catalog.type}
        self.filter_selections = {key: key in DEFAULT_FILTER_KEYS for key in catalog.filter}
        self.last_known_total = 0
        self.mode = ListMode.DEFAULT

    # Updates

    def apply_update(self, command: Command | None) -> UpdateOutcome:
        """Apply a selection or page change and report what happened."""
        if command is None:
            return UpdateOutcome.NO_CHANGE
        if isinstance(command, SelectionChange):
            self._apply_selection(command)
            return UpdateOutcome.SELECTION_APPLIED
        if isinstance(command, PageChange):
            return self._apply_page(command)
        raise TypeError(f"Unsupported order list command: {command!r}")

    def _apply_selection(self, command: SelectionChange) -> None:
        status = {
            key: _is_included(command.status_choices.get(key))
            for key in self.catalog.status
        }
        types = {
            key: _is_included(command.type_choices.get(key))
            for key in self.catalog.type
        }
        filters = {
            key: _is_included(command.filter_choices.get(key))
            for key in self.catalog.filter
        }
        self.status_selections = status
        self.type_selections = types
        self.filter_selections = filters
        self.page_index = 0
        self.mode = ListMode.FILTERED

    def _apply_page(self, command: PageChange) -> UpdateOutcome:
        try:
            size, index = parse_page_change(command.page_size, command.page_index)
        except ParseError as exc:
            logger.warning(
                "Values of %s [%s] and %s [%s] rejected (%s); not paginating order list.",
                VIEW_SIZE_PARAM,
                exc.raw_size,
                VIEW_INDEX_PARAM,
                exc.raw_index,
                exc.reason,
            )
            return UpdateOutcome.PAGE_REJECTED
        self.page_size, self.page_index = size, index
        self.mode = ListMode.PAGINATED
        return UpdateOutcome.PAGE_APPLIED

    def record_total(self, total: int) -> None:
        """Remember the match count from the most recent fetch."""
        self.last_known_total = max(0, int(total))

    # Queries

    def has_status(self, key: str) -> bool:
        return self.status_selections.get(key, False)

    def has_type(self, key: str) -> bool:
        return self.type_selections.get(key, False)

    def has_filter(self, key: str) -> bool:
        return self.filter_selections.get(key, False)

    def has_all_status(self) -> bool:
        """Return True when every order status is selected."""
        return all(self.status_selections.values())

    def has_previous(self) -> bool:
        return self.page_index > 0

    def has_next(self) -> bool:
        """Return True when rows remain past the current page."""
        return (self.page_index + 1) * self.page_size < self.last_known_total

    def status_view(self) -> Mapping[str, bool]:
        return MappingProxyType(self.status_selections)

    def type_view(self) -> Mapping[str, bool]:
        return MappingProxyType(self.type_selections)

    def filter_view(self) -> Mapping[str, bool]:
        return MappingProxyType(self.filter_selections)

    # Snapshots

    def to_dict(self) -> dict[str, Any]:
        """Serialize the state into plain JSON-friendly values."""
        return {
            "view_size": self.page_size,
            "view_index": self.page_index,
            "status": dict(self.status_selections),
            "type": dict(self.type_selections),
            "filter": dict(self.filter_selections),
            "last_known_total": self.last_known_total,
            "mode": self.mode.value,
        }

    @classmethod
    def from_dict(
        cls,
        payload: Mapping[str, Any],
        catalog: ParameterCatalog = CATALOG,
    ) -> "FilterState":
        """Rebuild a state from ``to_dict`` output; unknown keys are dropped."""
        state = cls(page_size=int(payload["view_size"]), catalog=catalog)
        state.page_index = max(0, int(payload.get("view_index", 0)))
        for name, keys in (
            ("status", catalog.status),
            ("type", catalog.type),
            ("filter", catalog.filter),
        ):
            stored = payload.get(name) or {}
            current = getattr(state, f"{name}_selections")
            current.update({key: bool(stored[key]) for key in keys if key in stored})
        state.last_known_total = max(0, int(payload.get("last_known_total", 0)))
        state.mode = ListMode(payload.get("mode", ListMode.DEFAULT.value))
        return state

    def describe(self) -> str:
        """Return a multi-line summary for debug logging."""
        return (
            "OrderListState:\n"
            f"\tview_index={self.page_index}, view_size={self.page_size}\n"
            f"\tstatus={self.status_selections}\n"
            f"\ttype={self.type_selections}\n"
            f"\tfilter={self.filter_selections}"
        )

    def __repr__(self) -> str:
        return (
            f"FilterState(view_size={self.page_size}, view_index={self.page_index}, "
            f"mode={self.mode.value}, total={self.last_known_total})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilterState):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]
