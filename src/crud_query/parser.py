"""QueryIntentParser — raw query params -> untrusted QueryIntent."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

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
from .operators import CursorDirection, FilterOperator, PaginationMode, RangeOperator
from .syntax import parse_filter_key, split_list
from .utils import lenient_int

logger = logging.getLogger("crud_query.parser")

RESERVED_KEYS = frozenset(
    {
        "page",
        "pageSize",
        "sortBy",
        "sortDir",
        "q",
        "cursor",
        "cursorField",
        "direction",
        "mode",
    }
)

RawParams = Mapping[str, Any]


class QueryIntentParser:
    """
    Translate query-string parameters into a ``QueryIntent``.

    Purely syntactic: no field names are checked and nothing is trusted.
    Parsing never fails: missing or malformed values fall back to defaults.
    """

    def __init__(self, *, default_page_size: int = 20) -> None:
        self._default_page_size = default_page_size

    def parse(self, raw_params: RawParams) -> QueryIntent:
        """Return the ``QueryIntent`` described by *raw_params*."""
        params = _normalise(raw_params)
        intent = QueryIntent(
            pagination=self._parse_pagination(params),
            sort=self._parse_sort(params),
            search=self._parse_search(params),
            filters=self._parse_filters(params),
        )
        logger.debug("Parsed query intent: %s", intent.to_dict())
        return intent

    # -- reserved keys ------------------------------------------------------

    def _parse_pagination(self, params: dict[str, list[str]]) -> Pagination:
        page_size = lenient_int(_last(params, "pageSize"), self._default_page_size)
        if _last(params, "mode") == PaginationMode.CURSOR.value:
            direction = (
                CursorDirection.PREV
                if _last(params, "direction") == CursorDirection.PREV.value
                else CursorDirection.NEXT
            )
            return CursorPagination(
                page_size=page_size,
                cursor=_last(params, "cursor") or None,
                cursor_field=_last(params, "cursorField") or None,
                direction=direction,
            )
        return OffsetPagination(
            page=lenient_int(_last(params, "page"), 1),
            page_size=page_size,
        )

    def _parse_sort(self, params: dict[str, list[str]]) -> Sort:
        return Sort(
            sort_by=_last(params, "sortBy") or None,
            sort_dir=_last(params, "sortDir") or "asc",
        )

    def _parse_search(self, params: dict[str, list[str]]) -> Search | None:
        q = _last(params, "q")
        if not q:
            return None
        return Search(q=q, columns=())

    # -- filters ------------------------------------------------------------

    def _parse_filters(self, params: dict[str, list[str]]) -> Filters:
        entries: list[FilterEntry] = []
        range_slots: dict[str, int] = {}

        for key, values in params.items():
            if key in RESERVED_KEYS:
                continue
            parsed = parse_filter_key(key)
            op = parsed.operator

            if op is None:
                entries.append(UnsupportedFilter(parsed.field, parsed.token))
            elif op is FilterOperator.EQUALS:
                entries.append(EqualsFilter(parsed.field, _collapse(values)))
            elif op is FilterOperator.IN:
                members = [m for v in values for m in split_list(v) if m]
                entries.append(EqualsFilter(parsed.field, tuple(members)))
            elif op is FilterOperator.CONTAINS:
                entries.append(ContainsFilter(parsed.field, _collapse(values)))
            else:
                bound = self._range_bound(RangeOperator(op.value), values)
                slot = range_slots.get(parsed.field)
                if slot is None:
                    range_slots[parsed.field] = len(entries)
                    entries.append(RangeFilter(parsed.field, (bound,)))
                else:
                    existing = entries[slot]
                    assert isinstance(existing, RangeFilter)
                    kept = tuple(
                        b for b in existing.bounds if b.operator is not bound.operator
                    )
                    entries[slot] = RangeFilter(parsed.field, kept + (bound,))

        return Filters(entries=tuple(entries))

    @staticmethod
    def _range_bound(op: RangeOperator, values: list[str]) -> RangeBound:
        if op is RangeOperator.BETWEEN:
            parts = [p for v in values for p in split_list(v)]
            return RangeBound(op, tuple(parts))
        return RangeBound(op, _collapse(values))


def parse_query(
    raw_params: RawParams, *, default_page_size: int = 20
) -> QueryIntent:
    """Shortcut for ``QueryIntentParser(...).parse(raw_params)``."""
    return QueryIntentParser(default_page_size=default_page_size).parse(raw_params)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalise(raw_params: RawParams) -> dict[str, list[str]]:
    """Turn any mapping (or multi-dict with ``getlist``) into key -> [values]."""
    getlist = getattr(raw_params, "getlist", None)
    out: dict[str, list[str]] = {}
    for key in raw_params:
        if callable(getlist):
            values: Any = getlist(key)
        else:
            values = raw_params[key]
        if values is None:
            continue
        if isinstance(values, str) or not isinstance(values, Sequence):
            values = [values]
        out[str(key)] = [str(v) for v in values if v is not None]
    return out


def _last(params: dict[str, list[str]], key: str) -> str | None:
    values = params.get(key)
    return values[-1] if values else None


def _collapse(values: list[str]) -> Any:
    if len(values) == 1:
        return values[0]
    return tuple(values)
