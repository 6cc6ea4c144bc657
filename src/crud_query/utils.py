"""
Shared helpers for the query package.

These are pure-Python helpers with no infrastructure dependencies.
"""

from __future__ import annotations

import datetime
from typing import Any

# ---------------------------------------------------------------------------
# Lenient numbers
# ---------------------------------------------------------------------------


def lenient_int(value: Any, fallback: int) -> int:
    """
    Convert *value* to ``int``, falling back when it is missing, non-numeric
    or zero.

    ``"2.7"`` truncates to ``2``; ``"abc"``, ``""`` and ``"0"`` give
    *fallback*.
    """
    if isinstance(value, list | tuple):
        value = value[-1] if value else None
    if value is None or isinstance(value, bool):
        return fallback
    try:
        number = float(str(value).strip())
    except ValueError:
        return fallback
    if number != number or number in (float("inf"), float("-inf")):
        return fallback
    return int(number) or fallback


# ---------------------------------------------------------------------------
# LIKE patterns
# ---------------------------------------------------------------------------

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters so user text never acts as a wildcard."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_pattern(value: str) -> str:
    """Wrap *value* in wildcards on both sides (after escaping)."""
    return f"%{escape_like(value)}%"


# ---------------------------------------------------------------------------
# Type casting
# ---------------------------------------------------------------------------

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def cast_value(value: Any, value_type: str | None) -> Any:
    """
    Cast *value* to the Python type named by *value_type*.

    Tuples and lists are cast element-wise.  ``None`` passes through.
    Supported *value_type* strings: ``string``, ``integer``, ``float``,
    ``boolean``, ``date``, ``datetime``.

    Raises:
        ValueError: If the value cannot be represented as *value_type*.
    """
    if isinstance(value, list | tuple):
        return tuple(cast_value(item, value_type) for item in value)
    if value is None or value_type is None:
        return value

    vt = value_type.lower()
    if vt == "string":
        return value if isinstance(value, str) else str(value)
    if vt == "integer":
        if isinstance(value, bool):
            raise ValueError(f"Expected integer, got {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"Expected integer, got {value!r}")
            return int(value)
        return int(str(value).strip())
    if vt == "float":
        if isinstance(value, bool):
            raise ValueError(f"Expected number, got {value!r}")
        return float(value)
    if vt == "boolean":
        return _cast_boolean(value)
    if vt == "datetime":
        if isinstance(value, datetime.datetime):
            return value
        return datetime.datetime.fromisoformat(str(value).strip())
    if vt == "date":
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        return datetime.date.fromisoformat(str(value).strip())
    raise ValueError(f"Unknown value type: {value_type!r}")


def _cast_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Expected boolean, got {value!r}")


def cast_to_python_type(value: Any, python_type: type[Any] | None) -> Any:
    """
    Best-effort cast of *value* to *python_type* (e.g. a column's type).

    Values that do not convert are returned unchanged; the database then
    decides how to compare them.
    """
    if python_type is None or value is None:
        return value
    if isinstance(value, list | tuple):
        return type(value)(cast_to_python_type(v, python_type) for v in value)
    if isinstance(value, python_type) and not (
        python_type is int and isinstance(value, bool)
    ):
        return value
    name = {
        str: "string",
        int: "integer",
        float: "float",
        bool: "boolean",
        datetime.datetime: "datetime",
        datetime.date: "date",
    }.get(python_type)
    if name is None:
        return value
    try:
        return cast_value(value, name)
    except (ValueError, TypeError):
        return value
