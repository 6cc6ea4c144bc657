"""QueryStringBuilder — intent -> query string (pagination links)."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from .intent import ContainsFilter, CursorPagination, EqualsFilter, RangeFilter
from .operators import RangeOperator

if TYPE_CHECKING:
    from .intent import QueryIntent


class QueryStringBuilder:
    """Render a ``QueryIntent`` back into the bracket query-string grammar."""

    def build(self, intent: QueryIntent, **overrides: Any) -> str:
        """
        Produce the query string for *intent*.

        Multi-value equals filters become repeated bare keys
        (``status=a&status=b``) so members may contain commas.

        Keyword *overrides* replace (or add) reserved keys, e.g.
        ``build(intent, page=3)`` or ``build(intent, cursor=41, direction="next")``.
        A value of ``None`` removes the key.
        """
        pairs = self._reserved_pairs(intent)
        for key, value in overrides.items():
            pairs = [(k, v) for k, v in pairs if k != key]
            if value is not None:
                pairs.append((key, _text(value)))
        pairs.extend(self._filter_pairs(intent))
        return urlencode(pairs) if pairs else ""

    @staticmethod
    def _reserved_pairs(intent: QueryIntent) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        p = intent.pagination
        if isinstance(p, CursorPagination):
            pairs.append(("mode", "cursor"))
            pairs.append(("pageSize", str(p.page_size)))
            if p.cursor is not None and p.cursor != "":
                pairs.append(("cursor", _text(p.cursor)))
            if p.cursor_field:
                pairs.append(("cursorField", p.cursor_field))
            pairs.append(("direction", p.direction.value))
        else:
            pairs.append(("page", str(p.page)))
            pairs.append(("pageSize", str(p.page_size)))
        if intent.sort.sort_by:
            pairs.append(("sortBy", intent.sort.sort_by))
            pairs.append(("sortDir", intent.sort.sort_dir))
        if intent.search is not None and intent.search.q:
            pairs.append(("q", intent.search.q))
        return pairs

    @staticmethod
    def _filter_pairs(intent: QueryIntent) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        for entry in intent.filters.entries:
            if isinstance(entry, EqualsFilter):
                if isinstance(entry.value, tuple) and len(entry.value) > 1:
                    pairs.extend((entry.field, _text(v)) for v in entry.value)
                elif isinstance(entry.value, tuple):
                    pairs.append((f"{entry.field}[in]", _join(entry.value)))
                else:
                    pairs.append((entry.field, _text(entry.value)))
            elif isinstance(entry, ContainsFilter):
                values = entry.value if isinstance(entry.value, tuple) else (entry.value,)
                pairs.extend((f"{entry.field}[contains]", _text(v)) for v in values)
            elif isinstance(entry, RangeFilter):
                for bound in entry.bounds:
                    key = f"{entry.field}[{bound.operator.value}]"
                    if bound.operator is RangeOperator.BETWEEN:
                        pairs.append((key, _join(bound.value)))
                    else:
                        pairs.append((key, _text(bound.value)))
        return pairs


def _text(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return str(value.isoformat())
    return str(value)


def _join(values: Any) -> str:
    return ",".join(_text(v) for v in values)
