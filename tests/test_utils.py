"""Tests for shared helpers."""

from __future__ import annotations

import datetime

import pytest

from crud_query.utils import (
    cast_to_python_type,
    cast_value,
    contains_pattern,
    escape_like,
    lenient_int,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("3", 3),
        ("2.7", 2),
        (" 5 ", 5),
        ("-4", -4),
        ("abc", 20),
        ("", 20),
        ("0", 20),
        (None, 20),
        ("nan", 20),
        ("inf", 20),
        (["1", "7"], 7),
        ([], 20),
    ],
)
def test_lenient_int(value: object, expected: int) -> None:
    assert lenient_int(value, 20) == expected


def test_escape_like() -> None:
    assert escape_like("100%") == "100\\%"
    assert escape_like("snake_case") == "snake\\_case"
    assert escape_like("back\\slash") == "back\\\\slash"
    assert contains_pattern("a%b") == "%a\\%b%"


class TestCastValue:
    def test_none_type_passes_through(self) -> None:
        assert cast_value("3", None) == "3"

    def test_integer(self) -> None:
        assert cast_value("3", "integer") == 3
        assert cast_value(4.0, "integer") == 4
        with pytest.raises(ValueError):
            cast_value("3.5", "integer")
        with pytest.raises(ValueError):
            cast_value(True, "integer")

    def test_float(self) -> None:
        assert cast_value("2.5", "float") == 2.5

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("1", True), ("Yes", True), ("false", False), ("off", False)],
    )
    def test_boolean(self, raw: str, expected: bool) -> None:
        assert cast_value(raw, "boolean") is expected

    def test_boolean_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            cast_value("maybe", "boolean")

    def test_dates(self) -> None:
        assert cast_value("2024-05-01", "date") == datetime.date(2024, 5, 1)
        assert cast_value("2024-05-01T10:30:00", "datetime") == datetime.datetime(
            2024, 5, 1, 10, 30
        )
        with pytest.raises(ValueError):
            cast_value("yesterday", "date")

    def test_sequences_are_cast_elementwise(self) -> None:
        assert cast_value(["1", "2"], "integer") == (1, 2)

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown value type"):
            cast_value("x", "uuid")


def test_cast_to_python_type_is_best_effort() -> None:
    assert cast_to_python_type("3", int) == 3
    assert cast_to_python_type("abc", int) == "abc"
    assert cast_to_python_type(("1", "2"), int) == (1, 2)
    assert cast_to_python_type("x", bytes) == "x"
    assert cast_to_python_type("3", None) == "3"
