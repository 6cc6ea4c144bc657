"""Tests for the filter-key grammar."""

from __future__ import annotations

import pytest

from crud_query.operators import FilterOperator
from crud_query.syntax import parse_filter_key, split_list


def test_bare_key_is_equals() -> None:
    key = parse_filter_key("status")
    assert key.field == "status"
    assert key.operator is FilterOperator.EQUALS
    assert key.supported


@pytest.mark.parametrize(
    ("raw", "field", "operator"),
    [
        ("created_at[gte]", "created_at", FilterOperator.GTE),
        ("created_at[lte]", "created_at", FilterOperator.LTE),
        ("score[gt]", "score", FilterOperator.GT),
        ("score[lt]", "score", FilterOperator.LT),
        ("score[between]", "score", FilterOperator.BETWEEN),
        ("title[contains]", "title", FilterOperator.CONTAINS),
        ("userId[equals]", "userId", FilterOperator.EQUALS),
        ("userId[in]", "userId", FilterOperator.IN),
        ("userId[EQ]", "userId", FilterOperator.EQUALS),
    ],
)
def test_bracket_operators(raw: str, field: str, operator: FilterOperator) -> None:
    key = parse_filter_key(raw)
    assert key.field == field
    assert key.operator is operator


def test_unknown_operator_is_unsupported() -> None:
    key = parse_filter_key("name[regex]")
    assert key.field == "name"
    assert key.operator is None
    assert key.token == "regex"
    assert not key.supported


@pytest.mark.parametrize("raw", ["name[gte", "name]gte[", "a[b][c]", "[gte]"])
def test_malformed_brackets_are_unsupported(raw: str) -> None:
    key = parse_filter_key(raw)
    assert key.operator is None
    assert key.field == raw


def test_split_list_keeps_empty_members() -> None:
    assert split_list("1, 2") == ["1", "2"]
    assert split_list("1,") == ["1", ""]
