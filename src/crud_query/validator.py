"""
QueryValidator: the security boundary between a client's request and the
database.

``validate`` returns a sanitized copy of the intent that only references
fields, operators and values permitted by the endpoint's ``FieldPolicy``.
It never mutates its input and never fails fast: every violation found is
collected and raised together as one :class:`ValidationError`.

Pagination is clamped, never rejected, except for a cursor that does not
convert to the cursor field's type.  ``filters.raw`` is always removed,
whatever the policy says.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Any

from .exceptions import ValidationError
from .intent import (
    ContainsFilter,
    CursorPagination,
    EqualsFilter,
    FilterEntry,
    Filters,
    OffsetPagination,
    Pagination,
    QueryIntent,
    RangeBound,
    RangeFilter,
    Search,
    Sort,
    UnsupportedFilter,
)
from .operators import RangeOperator
from .policy import DEFAULT_MAX_PAGE, PageSizeBounds
from .utils import cast_value

if TYPE_CHECKING:
    from .policy import FieldPolicy, FilterRule

logger = logging.getLogger("crud_query.validator")

_DIRECTIONS = ("asc", "desc")


class QueryValidator:
    """Check a ``QueryIntent`` against a ``FieldPolicy``."""

    def __init__(
        self,
        *,
        default_bounds: PageSizeBounds | None = None,
        max_page: int = DEFAULT_MAX_PAGE,
    ) -> None:
        """
        Initialize QueryValidator.

        Args:
            default_bounds: Page-size bounds for policies that do not set
                their own.  Defaults to ``1..200``.
            max_page: Highest page number offset requests are clamped to.
        """
        self._default_bounds = default_bounds or PageSizeBounds()
        self._max_page = max_page

    def validate(self, intent: QueryIntent, policy: FieldPolicy) -> QueryIntent:
        """
        Return a sanitized copy of *intent*.

        Raises:
            ValidationError: Listing every violation found.
        """
        errors: list[str] = []

        bounds = policy.page_size_bounds or self._default_bounds
        pagination = self._clamp_pagination(intent.pagination, bounds)
        pagination = self._check_cursor(pagination, intent.sort, policy, errors)
        sort = self._check_sort(intent.sort, policy, errors)
        search = self._check_search(intent.search, policy, errors)
        filters = self._check_filters(intent.filters, policy, errors)

        if errors:
            logger.info(
                "Rejected query with %d violation(s): %s",
                len(errors),
                "; ".join(errors),
            )
            raise ValidationError(errors)

        return QueryIntent(
            pagination=pagination, sort=sort, search=search, filters=filters
        )

    # -- pagination ---------------------------------------------------------

    def _clamp_pagination(
        self, pagination: Pagination, bounds: PageSizeBounds
    ) -> Pagination:
        page_size = bounds.clamp(pagination.page_size)
        if page_size != pagination.page_size:
            logger.debug(
                "Clamped page size %d to %d (bounds %d..%d)",
                pagination.page_size,
                page_size,
                bounds.min,
                bounds.max,
            )
        if isinstance(pagination, CursorPagination):
            return CursorPagination(
                page_size=page_size,
                cursor=pagination.cursor,
                cursor_field=pagination.cursor_field,
                direction=pagination.direction,
            )
        page = min(max(pagination.page, 1), self._max_page)
        if page != pagination.page:
            logger.debug("Clamped page %d to %d", pagination.page, page)
        return OffsetPagination(page=page, page_size=page_size)

    @staticmethod
    def _check_cursor(
        pagination: Pagination, sort: Sort, policy: FieldPolicy, errors: list[str]
    ) -> Pagination:
        if not isinstance(pagination, CursorPagination):
            return pagination
        field = pagination.cursor_field
        if field and field not in policy.sort_columns:
            errors.append(f"invalid cursor field: {field}")
            return pagination

        cursor = pagination.cursor
        if cursor is None or cursor == "":
            return pagination
        try:
            cursor = cast_value(cursor, policy.cursor_type_for(field or sort.sort_by))
        except (ValueError, TypeError):
            errors.append(f"invalid cursor: {pagination.cursor}")
            return pagination
        return dataclasses.replace(pagination, cursor=cursor)

    # -- sort ---------------------------------------------------------------

    @staticmethod
    def _check_sort(sort: Sort, policy: FieldPolicy, errors: list[str]) -> Sort:
        if sort.sort_by and sort.sort_by not in policy.sort_columns:
            errors.append(f"invalid sort column: {sort.sort_by}")

        direction = sort.sort_dir.lower()
        if direction not in _DIRECTIONS or direction not in policy.sort_directions:
            errors.append(f"invalid sort direction: {sort.sort_dir}")
            direction = sort.sort_dir
        return Sort(sort_by=sort.sort_by, sort_dir=direction)

    # -- search -------------------------------------------------------------

    @staticmethod
    def _check_search(
        search: Search | None, policy: FieldPolicy, errors: list[str]
    ) -> Search | None:
        if search is None or not search.q:
            return None

        allowed = policy.search_columns
        if not allowed:
            logger.debug("Search columns stripped: endpoint allows no search")
            return Search(q=search.q, columns=())
        if not search.columns:
            return Search(q=search.q, columns=tuple(allowed))

        bad = [c for c in search.columns if c not in allowed]
        for column in bad:
            errors.append(f"invalid search column: {column}")
        return Search(
            q=search.q, columns=tuple(c for c in search.columns if c in allowed)
        )

    # -- filters ------------------------------------------------------------

    def _check_filters(
        self, filters: Filters, policy: FieldPolicy, errors: list[str]
    ) -> Filters:
        if filters.raw is not None:
            logger.debug("Stripped raw filter from untrusted query")
        if not filters.entries:
            return Filters()
        if not policy.allows_filtering:
            logger.debug(
                "Stripped %d filter(s): endpoint allows no filtering",
                len(filters.entries),
            )
            return Filters()

        kept: list[FilterEntry] = []
        for entry in filters.entries:
            checked = self._check_entry(entry, policy, errors)
            if checked is not None:
                kept.append(checked)
        return Filters(entries=tuple(kept))

    def _check_entry(
        self, entry: FilterEntry, policy: FieldPolicy, errors: list[str]
    ) -> FilterEntry | None:
        if isinstance(entry, UnsupportedFilter):
            if entry.operator:
                errors.append(
                    f'unsupported filter operator "{entry.operator}" '
                    f'on field "{entry.field}"'
                )
            else:
                errors.append(f'malformed filter key "{entry.field}"')
            return None

        rule = policy.rule_for(entry.field)
        if isinstance(entry, EqualsFilter):
            return self._check_equals(entry, rule, errors)
        if isinstance(entry, ContainsFilter):
            return self._check_contains(entry, rule, errors)
        return self._check_range(entry, rule, errors)

    def _check_equals(
        self, entry: EqualsFilter, rule: FilterRule | None, errors: list[str]
    ) -> EqualsFilter | None:
        if rule is None or not rule.allow.equals:
            errors.append(_not_allowed(entry.field, "equals"))
            return None

        value = entry.value
        if not _is_scalar_or_scalars(value):
            errors.append(f"invalid value for equals({entry.field})")
            return entry
        try:
            value = cast_value(value, rule.value_type)
        except (ValueError, TypeError):
            errors.append(f"invalid value for equals({entry.field})")
            return entry

        _run_custom(rule, "equals", entry.field, value, errors)
        return EqualsFilter(entry.field, value)

    def _check_contains(
        self, entry: ContainsFilter, rule: FilterRule | None, errors: list[str]
    ) -> ContainsFilter | None:
        if rule is None or not rule.allow.contains:
            errors.append(_not_allowed(entry.field, "contains"))
            return None

        value = entry.value
        is_text = isinstance(value, str) or (
            isinstance(value, tuple) and all(isinstance(v, str) for v in value)
        )
        if not is_text:
            errors.append(f"invalid value for contains({entry.field})")
            return entry

        _run_custom(rule, "contains", entry.field, value, errors)
        return entry

    def _check_range(
        self, entry: RangeFilter, rule: FilterRule | None, errors: list[str]
    ) -> RangeFilter | None:
        allowed = rule.allow.range if rule is not None else frozenset()
        kept: list[RangeBound] = []

        for bound in entry.bounds:
            op = bound.operator
            if rule is None or op not in allowed:
                errors.append(_not_allowed(entry.field, op.value))
                continue

            value = bound.value
            if op is RangeOperator.BETWEEN:
                if not isinstance(value, tuple) or len(value) != 2:
                    errors.append(f"between({entry.field}) requires exactly 2 values")
                    continue
            elif isinstance(value, tuple):
                errors.append(f"invalid value for {op.value}({entry.field})")
                continue

            if not _is_scalar_or_scalars(value):
                errors.append(f"invalid value for {op.value}({entry.field})")
                continue
            try:
                value = cast_value(value, rule.value_type)
            except (ValueError, TypeError):
                errors.append(f"invalid value for {op.value}({entry.field})")
                continue
            kept.append(RangeBound(op, value))

        if not kept:
            return None

        checked = RangeFilter(entry.field, tuple(kept))
        if rule is not None:
            _run_custom(rule, "range", entry.field, checked.as_mapping(), errors)
        return checked


def validate_query(
    intent: QueryIntent,
    policy: FieldPolicy,
    *,
    default_bounds: PageSizeBounds | None = None,
    max_page: int = DEFAULT_MAX_PAGE,
) -> QueryIntent:
    """Shortcut for ``QueryValidator(...).validate(intent, policy)``."""
    validator = QueryValidator(default_bounds=default_bounds, max_page=max_page)
    return validator.validate(intent, policy)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _not_allowed(field: str, operator: str) -> str:
    return f'filtering not allowed on field "{field}" with operator "{operator}"'


def _is_scalar(value: Any) -> bool:
    return not isinstance(value, tuple | list | dict | set | frozenset)


def _is_scalar_or_scalars(value: Any) -> bool:
    if isinstance(value, tuple):
        return len(value) > 0 and all(_is_scalar(v) for v in value)
    return _is_scalar(value)


def _run_custom(
    rule: FilterRule, kind: str, field: str, value: Any, errors: list[str]
) -> None:
    check = rule.validators.get(kind)
    if check is None:
        return
    try:
        ok = check(value)
    except (ValueError, TypeError):
        ok = False
    if not ok:
        errors.append(f"custom validation failed for {kind}({field})")
