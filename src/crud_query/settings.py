"""QuerySettings — defaults shared by every endpoint of a service."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .operators import Dialect, SortDirection
from .plan import OrderItem
from .policy import DEFAULT_MAX_PAGE, PageSizeBounds

DEFAULT_ENV_PREFIX = "CRUD_QUERY_"


class QuerySettings(BaseSettings):
    """
    Immutable service-wide query configuration.

    Values come from keyword arguments, then ``CRUD_QUERY_*`` environment
    variables, then the defaults below, e.g. ``CRUD_QUERY_DIALECT=sqlite``,
    ``CRUD_QUERY_MAX_PAGE_SIZE=500`` or ``CRUD_QUERY_DEFAULT_ORDER=-createdAt,id``.

    Attributes:
        dialect: SQL dialect; picks ``ilike`` (postgres) or ``like``.
        default_page_size: Page size used when the request omits one.
        default_order: Ordering applied when the request has no ``sortBy``.
        min_page_size: Lower page-size bound for policies without their own.
        max_page_size: Upper page-size bound for policies without their own.
        max_page: Highest page number an offset request is clamped to.
    """

    model_config = SettingsConfigDict(
        env_prefix=DEFAULT_ENV_PREFIX,
        frozen=True,
        extra="ignore",
    )

    dialect: Dialect = Dialect.POSTGRES
    default_page_size: int = Field(default=20, ge=1)
    default_order: Annotated[tuple[OrderItem, ...], NoDecode] = (
        OrderItem("createdAt", SortDirection.DESC),
    )
    min_page_size: int = Field(default=1, ge=1)
    max_page_size: int = Field(default=200, ge=1)
    max_page: int = Field(default=DEFAULT_MAX_PAGE, ge=1)

    @field_validator("dialect", mode="before")
    @classmethod
    def _lowercase_dialect(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("default_order", mode="before")
    @classmethod
    def _parse_order(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(OrderItem.parse(p) for p in value.split(",") if p.strip())
        return value

    @model_validator(mode="after")
    def _bounds_ordered(self) -> QuerySettings:
        if self.min_page_size > self.max_page_size:
            raise ValueError(
                f"min_page_size ({self.min_page_size}) must not exceed "
                f"max_page_size ({self.max_page_size})"
            )
        return self

    @property
    def page_size_bounds(self) -> PageSizeBounds:
        return PageSizeBounds(min=self.min_page_size, max=self.max_page_size)

    @classmethod
    def from_env(cls, *, prefix: str = DEFAULT_ENV_PREFIX, **overrides: Any) -> QuerySettings:
        """Read settings from environment variables named ``<prefix><FIELD>``."""
        return cls(_env_prefix=prefix, **overrides)
