"""
QueryPlan — the trusted, backend-agnostic output of the compiler.

The predicate is a tree of ``And`` / ``Or`` nodes over ``Comparison`` leaves.
Every node is immutable; fragments are combined with :func:`and_all` and
:func:`or_any`, which drop absent parts and collapse single-child groups so
that no empty or no-op nodes reach the backend.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Union

from .operators import CursorDirection, PlanOperator, SortDirection


@dataclass(frozen=True)
class Comparison:
    """Leaf comparison ``field <operator> value``."""

    field: str
    operator: PlanOperator
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.operator.value, "attr": self.field, "val": _plain(self.value)}

    def fields(self) -> Iterator[str]:
        yield self.field


@dataclass(frozen=True)
class And:
    """Logical AND group."""

    conditions: tuple[Predicate, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": PlanOperator.AND.value,
            "conditions": [c.to_dict() for c in self.conditions],
        }

    def fields(self) -> Iterator[str]:
        for c in self.conditions:
            yield from c.fields()


@dataclass(frozen=True)
class Or:
    """Logical OR group."""

    conditions: tuple[Predicate, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": PlanOperator.OR.value,
            "conditions": [c.to_dict() for c in self.conditions],
        }

    def fields(self) -> Iterator[str]:
        for c in self.conditions:
            yield from c.fields()


Predicate = Union[Comparison, And, Or]


def and_all(parts: Iterable[Predicate | None]) -> Predicate | None:
    """AND the present *parts*; nested ANDs are flattened."""
    flat: list[Predicate] = []
    for part in parts:
        if part is None:
            continue
        if isinstance(part, And):
            flat.extend(part.conditions)
        else:
            flat.append(part)
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return And(tuple(flat))


def or_any(parts: Iterable[Predicate | None]) -> Predicate | None:
    """OR the present *parts*."""
    present = [p for p in parts if p is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return Or(tuple(present))


@dataclass(frozen=True)
class OrderItem:
    field: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def parse(cls, expr: str) -> OrderItem:
        """Parse ``"-created_at"`` / ``"name"`` into an ``OrderItem``."""
        expr = expr.strip()
        if expr.startswith("-"):
            return cls(expr[1:], SortDirection.DESC)
        return cls(expr, SortDirection.ASC)

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC

    def inverted(self) -> OrderItem:
        return OrderItem(
            self.field,
            SortDirection.ASC if self.descending else SortDirection.DESC,
        )


@dataclass(frozen=True)
class QueryPlan:
    """
    Immutable, validated query plan.

    Attributes:
        predicate: Full filter tree, cursor predicate included.
            ``None`` = no filter.
        order: Ordering list.
        limit: Page size.
        offset: Rows to skip (offset pagination only).
        cursor_predicate: Cursor comparison (cursor pagination only).
        cursor_field: Field the cursor is read from (cursor pagination only).
        cursor_direction: Requested traversal direction (cursor pagination only).
        page: Requested page number (offset pagination only).
    """

    predicate: Predicate | None
    order: tuple[OrderItem, ...]
    limit: int
    offset: int | None = None
    cursor_predicate: Comparison | None = None
    cursor_field: str | None = None
    cursor_direction: CursorDirection | None = None
    page: int | None = None

    @property
    def is_cursor(self) -> bool:
        return self.cursor_field is not None

    def fields(self) -> set[str]:
        """Every field referenced by the predicate and the ordering."""
        referenced = set(self.predicate.fields()) if self.predicate else set()
        referenced.update(item.field for item in self.order)
        return referenced

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        result: dict[str, Any] = {
            "order": [[item.field, item.direction.value] for item in self.order],
            "limit": self.limit,
        }
        if self.predicate is not None:
            result["where"] = self.predicate.to_dict()
        if self.offset is not None:
            result["offset"] = self.offset
        if self.cursor_predicate is not None:
            result["cursor"] = self.cursor_predicate.to_dict()
        return result


def _plain(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    return value
