"""FieldPolicy — per-endpoint allowlist of sortable, searchable and filterable fields."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .operators import RangeOperator

ValueType = Literal["string", "integer", "float", "boolean", "date", "datetime"]

_VALIDATOR_KINDS = frozenset({"equals", "contains", "range"})
_DIRECTIONS = frozenset({"asc", "desc"})

DEFAULT_MAX_PAGE = 10_000


class AllowedOperators(BaseModel):
    """
    Operators a single field may be filtered with.

    ``range`` accepts either a set of sub-operator names or the mapping form
    ``{"gte": True, "lte": True}``.
    """

    model_config = ConfigDict(frozen=True)

    equals: bool = False
    contains: bool = False
    range: frozenset[RangeOperator] = frozenset()

    @field_validator("range", mode="before")
    @classmethod
    def _range_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {op for op, enabled in value.items() if enabled}
        return value


class FilterRule(BaseModel):
    """
    Filtering rule for one field.

    Attributes:
        field: Field name as exposed by the API.
        allow: Operators permitted on the field.
        validators: Optional custom checks keyed by ``equals``, ``contains``
            or ``range``.  Each receives the (coerced) value (for ``range``
            a ``{sub_operator: value}`` mapping) and returns ``True`` when
            the value is acceptable.
        value_type: Optional type filter values are coerced to.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    allow: AllowedOperators = Field(default_factory=AllowedOperators)
    validators: dict[str, Callable[[Any], bool]] = Field(default_factory=dict)
    value_type: ValueType | None = None

    @field_validator("validators")
    @classmethod
    def _known_validator_kinds(
        cls, value: dict[str, Callable[[Any], bool]]
    ) -> dict[str, Callable[[Any], bool]]:
        unknown = set(value) - _VALIDATOR_KINDS
        if unknown:
            raise ValueError(
                f"Unknown validator kinds: {', '.join(sorted(unknown))}. "
                f"Expected one of: {', '.join(sorted(_VALIDATOR_KINDS))}"
            )
        return value


class PageSizeBounds(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int = Field(default=1, ge=1)
    max: int = Field(default=200, ge=1)

    @model_validator(mode="after")
    def _ordered(self) -> PageSizeBounds:
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self

    def clamp(self, value: int) -> int:
        return max(self.min, min(self.max, value))


class FieldPolicy(BaseModel):
    """
    Server-defined allowlist for one endpoint.

    Anything not listed here is rejected by the validator.  ``filter_rules``
    of ``None`` (or empty) denies every filter.  ``page_size_bounds`` of
    ``None`` defers to the validator's configured defaults.

    Cursor values are coerced to the ``value_type`` of the cursor field's
    filter rule, or to ``cursor_type`` when that rule sets none.
    """

    model_config = ConfigDict(frozen=True)

    sort_columns: frozenset[str] = frozenset()
    sort_directions: frozenset[str] = _DIRECTIONS
    search_columns: tuple[str, ...] = ()
    filter_rules: tuple[FilterRule, ...] | None = None
    page_size_bounds: PageSizeBounds | None = None
    cursor_type: ValueType | None = None

    @field_validator("sort_directions", mode="before")
    @classmethod
    def _lowercase_directions(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        directions = {str(getattr(d, "value", d)).lower() for d in value}
        unknown = directions - _DIRECTIONS
        if unknown:
            raise ValueError(f"Unknown sort directions: {', '.join(sorted(unknown))}")
        return directions

    def rule_for(self, field: str) -> FilterRule | None:
        """Return the rule for *field* (the last one wins on duplicates)."""
        found: FilterRule | None = None
        for rule in self.filter_rules or ():
            if rule.field == field:
                found = rule
        return found

    def cursor_type_for(self, field: str | None) -> ValueType | None:
        """Return the type cursor values on *field* are coerced to."""
        rule = self.rule_for(field) if field else None
        if rule is not None and rule.value_type is not None:
            return rule.value_type
        return self.cursor_type

    @property
    def allows_filtering(self) -> bool:
        return bool(self.filter_rules)
