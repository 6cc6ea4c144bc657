"""
Filter-key grammar for query strings.

A filter key is either a bare field name (``status=active`` → equals) or a
field name followed by a single bracketed operator token
(``created_at[gte]=2024-01-01``).  Operator tokens form a closed set; an
unknown token or a malformed bracket expression is reported as unsupported
instead of being folded into an equals filter on a literal key.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from .operators import FilterOperator

_BRACKET_KEY = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<op>[^\[\]]*)\]$")

# Map accepted spellings to operator tokens
_OP_ALIASES: dict[str, FilterOperator] = {
    "equals": FilterOperator.EQUALS,
    "eq": FilterOperator.EQUALS,
    "in": FilterOperator.IN,
    "contains": FilterOperator.CONTAINS,
    "gte": FilterOperator.GTE,
    "lte": FilterOperator.LTE,
    "gt": FilterOperator.GT,
    "lt": FilterOperator.LT,
    "between": FilterOperator.BETWEEN,
}


class FilterKey(NamedTuple):
    """Result of parsing one filter key.

    ``operator`` is ``None`` when the token is not part of the grammar; the
    raw token is then kept in ``token``.
    """

    field: str
    operator: FilterOperator | None
    token: str

    @property
    def supported(self) -> bool:
        return self.operator is not None


def parse_filter_key(key: str) -> FilterKey:
    """Split *key* into field name and operator token."""
    if "[" not in key and "]" not in key:
        return FilterKey(key, FilterOperator.EQUALS, FilterOperator.EQUALS.value)

    match = _BRACKET_KEY.match(key)
    if match is None:
        return FilterKey(key, None, "")

    token = match.group("op").strip().lower()
    return FilterKey(match.group("field"), _OP_ALIASES.get(token), token)


def split_list(value: str) -> list[str]:
    """Comma-split a raw value, keeping empty members (arity matters)."""
    return [part.strip() for part in value.split(",")]
