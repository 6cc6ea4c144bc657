"""
PlanExecutor — run a ``QueryPlan`` on an ``AsyncSession`` and return a ``Page``.

Offset plans run a ``COUNT(*)`` over the same predicate and return
:class:`~crud_query.page.PageMeta`.  Cursor plans read one extra row to
tell whether another page exists and return
:class:`~crud_query.page.CursorMeta`.

For ``prev`` cursor requests rows are read in inverted order (nearest to
the cursor first) and reversed, so the page keeps the requested order and
ends right before the cursor row.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func, select

from ..operators import CursorDirection
from ..page import CursorMeta, Page, PageMeta
from .compiler import build_order_by, build_sqla_filter
from .operators import DEFAULT_SQLA_REGISTRY

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from ..plan import QueryPlan
    from .strategy import SQLAlchemyOperatorRegistry

logger = logging.getLogger("crud_query.sqla")

T = TypeVar("T")


class PlanExecutor(Generic[T]):
    """Executes plans against one SQLAlchemy model."""

    def __init__(
        self,
        model: type[T],
        *,
        field_map: Mapping[str, str] | None = None,
        registry: SQLAlchemyOperatorRegistry | None = None,
    ) -> None:
        self.model = model
        self.field_map = dict(field_map or {})
        self._registry = registry or DEFAULT_SQLA_REGISTRY

    async def fetch(self, session: AsyncSession, plan: QueryPlan) -> Page[T]:
        """Return the page of rows described by *plan*."""
        if plan.is_cursor:
            return await self._fetch_cursor(session, plan)
        return await self._fetch_offset(session, plan)

    # -- offset -------------------------------------------------------------

    async def _fetch_offset(self, session: AsyncSession, plan: QueryPlan) -> Page[T]:
        count_stmt = self._where(select(func.count()).select_from(self.model), plan)
        total = int((await session.execute(count_stmt)).scalar_one())

        stmt = self._where(select(self.model), plan)
        stmt = stmt.order_by(
            *build_order_by(self.model, plan.order, field_map=self.field_map)
        ).limit(plan.limit)
        if plan.offset:
            stmt = stmt.offset(plan.offset)
        items = list((await session.execute(stmt)).scalars().all())

        logger.debug(
            "Fetched %d of %d %s row(s) at offset %s",
            len(items),
            total,
            self.model.__name__,
            plan.offset,
        )
        meta = PageMeta.build(
            page=plan.page or 1, page_size=plan.limit, total_items=total
        )
        return Page(items=items, meta=meta)

    # -- cursor -------------------------------------------------------------

    async def _fetch_cursor(self, session: AsyncSession, plan: QueryPlan) -> Page[T]:
        backwards = plan.cursor_direction is CursorDirection.PREV
        order = tuple(o.inverted() for o in plan.order) if backwards else plan.order

        stmt = self._where(select(self.model), plan)
        stmt = stmt.order_by(
            *build_order_by(self.model, order, field_map=self.field_map)
        ).limit(plan.limit + 1)
        rows = list((await session.execute(stmt)).scalars().all())

        has_more = len(rows) > plan.limit
        items = rows[: plan.limit]
        if backwards:
            items.reverse()

        assert plan.cursor_field is not None
        attr = self.field_map.get(plan.cursor_field, plan.cursor_field)
        meta = CursorMeta(
            page_size=plan.limit,
            cursor_field=plan.cursor_field,
            has_more=has_more,
            next_cursor=getattr(items[-1], attr) if items else None,
            prev_cursor=getattr(items[0], attr) if items else None,
        )
        logger.debug(
            "Fetched %d %s row(s) by cursor (has_more=%s)",
            len(items),
            self.model.__name__,
            has_more,
        )
        return Page(items=items, meta=meta)

    # -- helpers ------------------------------------------------------------

    def _where(self, stmt: Select[Any], plan: QueryPlan) -> Select[Any]:
        if plan.predicate is None:
            return stmt
        return stmt.where(
            build_sqla_filter(
                self.model,
                plan.predicate,
                field_map=self.field_map,
                registry=self._registry,
            )
        )
