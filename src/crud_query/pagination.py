"""
Pagination strategies — offset/limit and cursor windows.

Offset pagination supports jumping to any page but makes the database skip
``(page - 1) * page_size`` rows.  Cursor pagination costs the same at any
depth but only walks forward or backward from a known row.

Cursor comparison table (order direction of the cursor field × requested
direction)::

    asc  + next -> gt        desc + next -> lt
    asc  + prev -> lt        desc + prev -> gt

There is no tie-break on duplicate cursor values: when the cursor field is
not unique, rows sharing the boundary value can be skipped or repeated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, NamedTuple

from .intent import CursorPagination, OffsetPagination
from .operators import CursorDirection, PlanOperator
from .plan import Comparison

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .intent import Pagination
    from .plan import OrderItem

DEFAULT_CURSOR_FIELD = "id"


class PaginationWindow(NamedTuple):
    limit: int
    offset: int | None = None
    page: int | None = None
    cursor_predicate: Comparison | None = None
    cursor_field: str | None = None
    direction: CursorDirection | None = None


class PaginationStrategy(ABC):
    """Turns a pagination request plus the effective order into a window."""

    @abstractmethod
    def apply(
        self, pagination: Pagination, order: Sequence[OrderItem]
    ) -> PaginationWindow: ...


class OffsetPaginationStrategy(PaginationStrategy):
    def apply(
        self, pagination: Pagination, order: Sequence[OrderItem]
    ) -> PaginationWindow:
        assert isinstance(pagination, OffsetPagination)
        return PaginationWindow(
            limit=pagination.page_size,
            offset=(pagination.page - 1) * pagination.page_size,
            page=pagination.page,
        )


class CursorPaginationStrategy(PaginationStrategy):
    def apply(
        self, pagination: Pagination, order: Sequence[OrderItem]
    ) -> PaginationWindow:
        assert isinstance(pagination, CursorPagination)
        field = pagination.cursor_field or (
            order[0].field if order else DEFAULT_CURSOR_FIELD
        )
        descending = bool(order) and order[0].descending

        predicate = None
        if _has_cursor(pagination.cursor):
            predicate = Comparison(
                field,
                cursor_operator(descending, pagination.direction),
                pagination.cursor,
            )

        return PaginationWindow(
            limit=pagination.page_size,
            cursor_predicate=predicate,
            cursor_field=field,
            direction=pagination.direction,
        )


def cursor_operator(descending: bool, direction: CursorDirection) -> PlanOperator:
    """Comparison used to read past the cursor value."""
    if direction is CursorDirection.NEXT:
        return PlanOperator.LT if descending else PlanOperator.GT
    return PlanOperator.GT if descending else PlanOperator.LT


_OFFSET = OffsetPaginationStrategy()
_CURSOR = CursorPaginationStrategy()


def strategy_for(pagination: Pagination) -> PaginationStrategy:
    if isinstance(pagination, CursorPagination):
        return _CURSOR
    return _OFFSET


def _has_cursor(cursor: Any) -> bool:
    return cursor is not None and cursor != ""
