"""Parse, validate and compile untrusted API query parameters into query plans."""

from __future__ import annotations

from .adapter import IPlanAdapter
from .compiler import QueryCompiler, compile_query
from .exceptions import ConstraintError, QueryError, ValidationError
from .injector import ConstraintInjector
from .intent import (
    ContainsFilter,
    CursorPagination,
    EqualsFilter,
    Filters,
    OffsetPagination,
    QueryIntent,
    RangeBound,
    RangeFilter,
    Search,
    Sort,
    UnsupportedFilter,
)
from .operators import (
    CursorDirection,
    Dialect,
    FilterOperator,
    PaginationMode,
    PlanOperator,
    RangeOperator,
    SortDirection,
)
from .page import CursorMeta, Page, PageMeta
from .parser import QueryIntentParser, parse_query
from .pipeline import QueryPipeline
from .plan import And, Comparison, Or, OrderItem, QueryPlan, and_all, or_any
from .policy import AllowedOperators, FieldPolicy, FilterRule, PageSizeBounds
from .query_string import QueryStringBuilder
from .settings import QuerySettings
from .validator import QueryValidator, validate_query

__all__ = [
    # Pipeline
    "QueryIntentParser",
    "QueryValidator",
    "QueryCompiler",
    "QueryPipeline",
    "parse_query",
    "validate_query",
    "compile_query",
    # Intent
    "QueryIntent",
    "OffsetPagination",
    "CursorPagination",
    "Sort",
    "Search",
    "Filters",
    "EqualsFilter",
    "ContainsFilter",
    "RangeFilter",
    "RangeBound",
    "UnsupportedFilter",
    # Policy / settings
    "FieldPolicy",
    "FilterRule",
    "AllowedOperators",
    "PageSizeBounds",
    "QuerySettings",
    # Plan
    "QueryPlan",
    "Comparison",
    "And",
    "Or",
    "OrderItem",
    "and_all",
    "or_any",
    # Operators
    "FilterOperator",
    "RangeOperator",
    "PlanOperator",
    "SortDirection",
    "PaginationMode",
    "CursorDirection",
    "Dialect",
    # Results / helpers
    "Page",
    "PageMeta",
    "CursorMeta",
    "ConstraintInjector",
    "QueryStringBuilder",
    "IPlanAdapter",
    # Exceptions
    "QueryError",
    "ValidationError",
    "ConstraintError",
]
