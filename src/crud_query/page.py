"""Page — one window of results plus its pagination metadata."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class PageMeta(BaseModel):
    """Offset pagination metadata (``currentPage``, ``totalPages``, ...)."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    current_page: int
    page_size: int
    total_items: int
    total_pages: int

    @classmethod
    def build(cls, *, page: int, page_size: int, total_items: int) -> PageMeta:
        return cls(
            current_page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=math.ceil(total_items / page_size) if page_size else 0,
        )


class CursorMeta(BaseModel):
    """Cursor pagination metadata.

    ``next_cursor`` / ``prev_cursor`` are the cursor-field values of the last
    and first rows of the page; feed them back as ``cursor`` with
    ``direction=next`` or ``direction=prev``.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    page_size: int
    cursor_field: str
    has_more: bool
    next_cursor: Any = None
    prev_cursor: Any = None


Meta = Union[PageMeta, CursorMeta]


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    meta: Meta

    def map(self, fn: Callable[[T], Any]) -> Page[Any]:
        """Return a page with *fn* applied to every item (e.g. to a DTO)."""
        return Page(items=[fn(item) for item in self.items], meta=self.meta)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": list(self.items),
            "meta": self.meta.model_dump(by_alias=True, mode="json"),
        }
