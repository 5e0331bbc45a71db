"""Condition tree types and their SQL WHERE rendering."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from .config import ORDER_FIELD_COLUMNS


class Operator(str, enum.Enum):
    """Boolean joiner for a condition list."""

    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class EqualsExpr:
    """``field == value`` over a logical order field."""

    field: str
    value: Any


@dataclass(frozen=True)
class ConditionList:
    """A group of conditions joined by one operator."""

    conditions: tuple["Condition", ...]
    operator: Operator

    def __bool__(self) -> bool:
        return bool(self.conditions)


Condition = Union[EqualsExpr, ConditionList]


def any_of(field: str, values: Iterable[Any]) -> ConditionList:
    """Build an OR group of equality tests on one field."""
    return ConditionList(
        tuple(EqualsExpr(field, value) for value in values),
        Operator.OR,
    )


def all_of(conditions: Iterable[Condition]) -> ConditionList:
    """Build an AND group of the given conditions."""
    return ConditionList(tuple(conditions), Operator.AND)


def _column_for(field: str, columns: Mapping[str, str]) -> str:
    try:
        return columns[field]
    except KeyError as exc:
        raise ValueError(f"Unknown order field: {field}") from exc


def _render(
    condition: Condition,
    params: list[Any],
    columns: Mapping[str, str],
) -> str | None:
    if isinstance(condition, EqualsExpr):
        params.append(condition.value)
        return f"{_column_for(condition.field, columns)} = %s"
    fragments = [
        fragment
        for fragment in (_render(child, params, columns) for child in condition.conditions)
        if fragment is not None
    ]
    if not fragments:
        # An empty AND restricts nothing; an empty OR matches nothing.
        return None if condition.operator is Operator.AND else "FALSE"
    if len(fragments) == 1:
        return fragments[0]
    return "(" + f" {condition.operator.value} ".join(fragments) + ")"


def render_where(
    condition: Condition,
    columns: Mapping[str, str] = ORDER_FIELD_COLUMNS,
) -> tuple[str, list[Any]]:
    """Render a condition tree into a ``WHERE`` clause and its params.

    Returns ``("", [])`` when the tree places no restriction on the rows.
    """
    params: list[Any] = []
    fragment = _render(condition, params, columns)
    if fragment is None:
        return "", params
    return f" WHERE {fragment}", params


def describe_condition(condition: Condition) -> str:
    """Return a compact, human readable form of a condition tree."""
    if isinstance(condition, EqualsExpr):
        return f"{condition.field}={condition.value}"
    inner = f" {condition.operator.value} ".join(
        describe_condition(child) for child in condition.conditions
    )
    return f"({inner})"
