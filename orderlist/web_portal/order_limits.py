"""Parsing helpers for order list paging values."""

from __future__ import annotations

import re
from typing import Any

from .config import max_view_size
from .errors import ParseError

_DECIMAL_RE = re.compile(r"[+-]?\d+")


def _parse_decimal(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if raw is None:
        return None
    value = str(raw).strip()
    if not _DECIMAL_RE.fullmatch(value):
        return None
    return int(value)


def parse_page_change(raw_size: Any, raw_index: Any) -> tuple[int, int]:
    """Parse a viewSize/viewIndex pair, raising ParseError when invalid."""
    size = _parse_decimal(raw_size)
    index = _parse_decimal(raw_index)
    if size is None or index is None:
        raise ParseError(raw_size, raw_index, "values must both be integers")
    if size <= 0:
        raise ParseError(raw_size, raw_index, "view size must be positive")
    if index < 0:
        raise ParseError(raw_size, raw_index, "view index must not be negative")
    limit = max_view_size()
    if size > limit:
        raise ParseError(raw_size, raw_index, f"view size exceeds {limit}")
    return size, index


def has_value(raw: Any) -> bool:
    """Return True when a raw request value is present and non-blank."""
    if raw is None:
        return False
    return bool(str(raw).strip())
