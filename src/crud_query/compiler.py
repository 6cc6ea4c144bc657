"""
Compile a *validated* ``QueryIntent`` into a backend-agnostic ``QueryPlan``.

Each filter kind compiles to an immutable fragment; the fragments are ANDed
in a fixed order (equals, contains, range, search, trusted constraints,
cursor) and absent parts are left out entirely.

Compiling an intent that did not go through the validator is a programming
error; the compiler does not re-check the allowlist.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .intent import ContainsFilter, EqualsFilter, RangeFilter
from .operators import RANGE_TO_PLAN, Dialect, PlanOperator, SortDirection
from .pagination import strategy_for
from .plan import Comparison, OrderItem, QueryPlan, and_all, or_any
from .utils import contains_pattern

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .intent import Filters, QueryIntent, Search, Sort
    from .plan import Predicate

logger = logging.getLogger("crud_query.compiler")

DEFAULT_ORDER: tuple[OrderItem, ...] = (OrderItem("createdAt", SortDirection.DESC),)


class QueryCompiler:
    """Deterministic ``QueryIntent`` -> ``QueryPlan`` translation."""

    def __init__(
        self,
        dialect: Dialect | str = Dialect.POSTGRES,
        *,
        default_order: Sequence[OrderItem] | None = None,
    ) -> None:
        """
        Initialize QueryCompiler.

        Args:
            dialect: SQL dialect; ``postgres`` compiles substring matches to
                ``ilike``, every other dialect to ``like``.
            default_order: Ordering used when the intent has no ``sort_by``.

        Raises:
            ValueError: If *dialect* is not a known dialect.
        """
        self._dialect = Dialect(dialect)
        self._default_order = tuple(
            DEFAULT_ORDER if default_order is None else default_order
        )

    @property
    def like_operator(self) -> PlanOperator:
        if self._dialect.case_insensitive_like:
            return PlanOperator.ILIKE
        return PlanOperator.LIKE

    def compile(
        self,
        intent: QueryIntent,
        *,
        constraints: Iterable[Predicate] = (),
    ) -> QueryPlan:
        """
        Return the ``QueryPlan`` for *intent*.

        Args:
            intent: A sanitized intent (output of the validator).
            constraints: Trusted predicates ANDed into the filter, e.g. an
                owner or tenant scope built by the server.
        """
        order = self._compile_order(intent.sort)
        window = strategy_for(intent.pagination).apply(intent.pagination, order)

        predicate = and_all(
            [
                self._compile_equals(intent.filters),
                self._compile_contains(intent.filters),
                self._compile_range(intent.filters),
                self._compile_search(intent.search),
                *constraints,
                window.cursor_predicate,
            ]
        )

        plan = QueryPlan(
            predicate=predicate,
            order=order,
            limit=window.limit,
            offset=window.offset,
            cursor_predicate=window.cursor_predicate,
            cursor_field=window.cursor_field,
            cursor_direction=window.direction,
            page=window.page,
        )
        logger.debug("Compiled query plan: %s", plan.to_dict())
        return plan

    # -- filters ------------------------------------------------------------

    @staticmethod
    def _compile_equals(filters: Filters) -> Predicate | None:
        leaves: list[Predicate] = []
        for entry in filters.of_type(EqualsFilter):
            if isinstance(entry.value, tuple):
                leaves.append(Comparison(entry.field, PlanOperator.IN, entry.value))
            else:
                leaves.append(Comparison(entry.field, PlanOperator.EQ, entry.value))
        return and_all(leaves)

    def _compile_contains(self, filters: Filters) -> Predicate | None:
        groups: list[Predicate | None] = []
        for entry in filters.of_type(ContainsFilter):
            values: tuple[Any, ...] = (
                entry.value if isinstance(entry.value, tuple) else (entry.value,)
            )
            groups.append(
                or_any(self._like(entry.field, v) for v in values if v)
            )
        return and_all(groups)

    @staticmethod
    def _compile_range(filters: Filters) -> Predicate | None:
        leaves: list[Predicate] = []
        for entry in filters.of_type(RangeFilter):
            for bound in entry.bounds:
                leaves.append(
                    Comparison(entry.field, RANGE_TO_PLAN[bound.operator], bound.value)
                )
        return and_all(leaves)

    def _compile_search(self, search: Search | None) -> Predicate | None:
        if search is None or not search.q or not search.columns:
            return None
        return or_any(self._like(column, search.q) for column in search.columns)

    def _like(self, field: str, value: str) -> Comparison:
        return Comparison(field, self.like_operator, contains_pattern(value))

    # -- ordering -----------------------------------------------------------

    def _compile_order(self, sort: Sort) -> tuple[OrderItem, ...]:
        if sort.sort_by:
            return (OrderItem(sort.sort_by, SortDirection(sort.sort_dir.lower())),)
        return self._default_order


def compile_query(
    intent: QueryIntent,
    *,
    dialect: Dialect | str = Dialect.POSTGRES,
    default_order: Sequence[OrderItem] | None = None,
    constraints: Iterable[Predicate] = (),
) -> QueryPlan:
    """Shortcut for ``QueryCompiler(...).compile(intent)``."""
    return QueryCompiler(dialect, default_order=default_order).compile(
        intent, constraints=constraints
    )
