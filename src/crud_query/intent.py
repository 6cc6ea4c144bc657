"""
Query intent: the structured, *untrusted* form of a client's request.

A ``QueryIntent`` is produced by the parser from raw query parameters and is
never executed directly: it must go through the validator, which returns a
sanitized copy, before the compiler turns it into a ``QueryPlan``.

Filters are carried as an ordered tuple of tagged entries
(``EqualsFilter | ContainsFilter | RangeFilter | UnsupportedFilter``) rather
than operator-keyed dictionaries.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Union

from .operators import CursorDirection, PaginationMode, RangeOperator

Scalar = Any
FilterValue = Union[Scalar, tuple[Scalar, ...]]

# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OffsetPagination:
    page: int = 1
    page_size: int = 20

    @property
    def mode(self) -> PaginationMode:
        return PaginationMode.OFFSET


@dataclass(frozen=True)
class CursorPagination:
    page_size: int = 20
    cursor: Any = None
    cursor_field: str | None = None
    direction: CursorDirection = CursorDirection.NEXT

    @property
    def mode(self) -> PaginationMode:
        return PaginationMode.CURSOR


Pagination = Union[OffsetPagination, CursorPagination]

# ---------------------------------------------------------------------------
# Sort / search
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Sort:
    sort_by: str | None = None
    sort_dir: str = "asc"


@dataclass(frozen=True)
class Search:
    q: str | None = None
    columns: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EqualsFilter:
    """``field = value``, or ``field IN values`` when *value* is a tuple."""

    field: str
    value: FilterValue

    operator_name = "equals"


@dataclass(frozen=True)
class ContainsFilter:
    """Substring match; a tuple value matches if *any* member matches."""

    field: str
    value: FilterValue

    operator_name = "contains"


@dataclass(frozen=True)
class RangeBound:
    operator: RangeOperator
    value: FilterValue


@dataclass(frozen=True)
class RangeFilter:
    """One or more range sub-operators on the same field, ANDed together."""

    field: str
    bounds: tuple[RangeBound, ...]

    operator_name = "range"

    def get(self, operator: RangeOperator) -> RangeBound | None:
        for bound in self.bounds:
            if bound.operator is operator:
                return bound
        return None

    def as_mapping(self) -> dict[str, FilterValue]:
        return {b.operator.value: b.value for b in self.bounds}


@dataclass(frozen=True)
class UnsupportedFilter:
    """A filter key whose operator token is not part of the grammar."""

    field: str
    operator: str

    operator_name = "unsupported"


FilterEntry = Union[EqualsFilter, ContainsFilter, RangeFilter, UnsupportedFilter]


@dataclass(frozen=True)
class Filters:
    """
    Ordered filter entries plus the ``raw`` escape hatch.

    ``raw`` holds a pre-built backend-native predicate.  It can only be set
    by trusted code and is always stripped by the validator.
    """

    entries: tuple[FilterEntry, ...] = ()
    raw: Any = None

    def __bool__(self) -> bool:
        return bool(self.entries) or self.raw is not None

    def of_type(self, kind: type[Any]) -> list[Any]:
        return [e for e in self.entries if isinstance(e, kind)]

    @property
    def equals(self) -> dict[str, FilterValue]:
        return {e.field: e.value for e in self.of_type(EqualsFilter)}

    @property
    def contains(self) -> dict[str, FilterValue]:
        return {e.field: e.value for e in self.of_type(ContainsFilter)}

    @property
    def range(self) -> dict[str, dict[str, FilterValue]]:
        return {e.field: e.as_mapping() for e in self.of_type(RangeFilter)}


# ---------------------------------------------------------------------------
# Intent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QueryIntent:
    """
    Immutable container for a client's requested query shape.

    Attributes:
        pagination: Offset or cursor pagination window.
        sort: Requested sort column and direction.
        search: Free-text search (``None`` = no search).
        filters: Filter entries (and, for trusted callers, ``raw``).
    """

    pagination: Pagination = field(default_factory=OffsetPagination)
    sort: Sort = field(default_factory=Sort)
    search: Search | None = None
    filters: Filters = field(default_factory=Filters)

    def replace(self, **changes: Any) -> QueryIntent:
        """Return a copy with the given attributes replaced."""
        return dataclasses.replace(self, **changes)

    def with_filters(self, *entries: FilterEntry) -> QueryIntent:
        """Return a copy with *entries* appended to the filters."""
        return self.replace(
            filters=Filters(
                entries=self.filters.entries + entries, raw=self.filters.raw
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary (for logging)."""
        pagination: dict[str, Any] = {"mode": self.pagination.mode.value}
        pagination.update(
            {
                k: (v.value if isinstance(v, CursorDirection) else v)
                for k, v in dataclasses.asdict(self.pagination).items()
            }
        )
        result: dict[str, Any] = {
            "pagination": pagination,
            "sort": {"sort_by": self.sort.sort_by, "sort_dir": self.sort.sort_dir},
        }
        if self.search is not None:
            result["search"] = {
                "q": self.search.q,
                "columns": list(self.search.columns),
            }
        if self.filters.entries:
            result["filters"] = [_entry_to_dict(e) for e in self.filters.entries]
        if self.filters.raw is not None:
            result["raw"] = True
        return result


def _entry_to_dict(entry: FilterEntry) -> dict[str, Any]:
    if isinstance(entry, RangeFilter):
        return {
            "field": entry.field,
            "op": "range",
            "val": {k: _jsonable(v) for k, v in entry.as_mapping().items()},
        }
    if isinstance(entry, UnsupportedFilter):
        return {"field": entry.field, "op": entry.operator}
    return {"field": entry.field, "op": entry.operator_name, "val": _jsonable(entry.value)}


def _jsonable(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_jsonable(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
