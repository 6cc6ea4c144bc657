"""
Compile a ``QueryPlan`` into SQLAlchemy constructs.

``build_sqla_filter`` walks the predicate tree and delegates each leaf to an
operator registry; ``apply_plan`` adds ordering and the pagination window to
a ``Select``.  Every value is bound as a parameter.

API field names map to model attributes through an optional ``field_map``
(e.g. ``{"createdAt": "created_at"}``).  Leaf values are coerced to the
column's Python type when the column exposes one, so ``"3"`` from a query
string compares as ``3`` against an integer column.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, and_, asc, desc, or_, select

from ..operators import PlanOperator
from ..plan import And, Comparison, Or
from ..utils import cast_to_python_type
from .operators import DEFAULT_SQLA_REGISTRY

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy import ColumnElement

    from ..plan import OrderItem, Predicate, QueryPlan
    from .strategy import SQLAlchemyOperatorRegistry

_PATTERN_OPERATORS = frozenset({PlanOperator.LIKE, PlanOperator.ILIKE})

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_sqla_filter(
    model: type[Any],
    predicate: Predicate,
    *,
    field_map: Mapping[str, str] | None = None,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> ColumnElement[bool]:
    """
    Build a SQLAlchemy filter expression from a plan predicate.

    Args:
        model: The SQLAlchemy model class.
        predicate: Predicate tree from ``QueryPlan.predicate``.
        field_map: Optional API field -> model attribute mapping.
        registry: Optional custom operator registry.  Falls back to
            ``DEFAULT_SQLA_REGISTRY``.

    Returns:
        SQLAlchemy Boolean expression.
    """
    reg = registry or DEFAULT_SQLA_REGISTRY
    return _compile_node(model, predicate, reg, field_map or {})


def resolve_column(
    model: type[Any], field: str, field_map: Mapping[str, str] | None = None
) -> Any:
    """Return the model attribute for API field *field*."""
    name = (field_map or {}).get(field, field)
    column = getattr(model, name, None)
    if column is None:
        raise AttributeError(f"Model {model.__name__} has no attribute {name}")
    return column


def build_order_by(
    model: type[Any],
    order: Sequence[OrderItem],
    *,
    field_map: Mapping[str, str] | None = None,
) -> list[Any]:
    clauses: list[Any] = []
    for item in order:
        column = resolve_column(model, item.field, field_map)
        clauses.append(desc(column) if item.descending else asc(column))
    return clauses


def apply_plan(
    stmt: Select[Any],
    model: type[Any],
    plan: QueryPlan,
    *,
    field_map: Mapping[str, str] | None = None,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> Select[Any]:
    """
    Apply a ``QueryPlan`` to a SQLAlchemy ``Select`` statement.

    Handles the predicate (cursor comparison included), ``order``,
    ``limit`` and ``offset``.
    """
    if plan.predicate is not None:
        stmt = stmt.where(
            build_sqla_filter(
                model, plan.predicate, field_map=field_map, registry=registry
            )
        )
    order_by = build_order_by(model, plan.order, field_map=field_map)
    if order_by:
        stmt = stmt.order_by(*order_by)
    stmt = stmt.limit(plan.limit)
    if plan.offset is not None:
        stmt = stmt.offset(plan.offset)
    return stmt


class SQLAlchemyPlanAdapter:
    """``IPlanAdapter`` producing a ``Select`` for one model."""

    def __init__(
        self,
        model: type[Any],
        *,
        field_map: Mapping[str, str] | None = None,
        registry: SQLAlchemyOperatorRegistry | None = None,
    ) -> None:
        self.model = model
        self.field_map = dict(field_map or {})
        self.registry = registry or DEFAULT_SQLA_REGISTRY

    def to_backend_query(self, plan: QueryPlan) -> Select[Any]:
        return apply_plan(
            select(self.model),
            self.model,
            plan,
            field_map=self.field_map,
            registry=self.registry,
        )


# ---------------------------------------------------------------------------
# Internal compilation
# ---------------------------------------------------------------------------


def _compile_node(
    model: type[Any],
    node: Predicate,
    registry: SQLAlchemyOperatorRegistry,
    field_map: Mapping[str, str],
) -> ColumnElement[bool]:
    if isinstance(node, And):
        return and_(*[_compile_node(model, c, registry, field_map) for c in node.conditions])
    if isinstance(node, Or):
        return or_(*[_compile_node(model, c, registry, field_map) for c in node.conditions])
    if isinstance(node, Comparison):
        return _compile_leaf(model, node, registry, field_map)
    raise TypeError(f"Unknown predicate node: {node!r}")


def _compile_leaf(
    model: type[Any],
    leaf: Comparison,
    registry: SQLAlchemyOperatorRegistry,
    field_map: Mapping[str, str],
) -> ColumnElement[bool]:
    column = resolve_column(model, leaf.field, field_map)
    value = leaf.value
    if leaf.operator not in _PATTERN_OPERATORS:
        value = cast_to_python_type(value, _python_type(column))
    return registry.build(leaf.operator, column, value)


def _python_type(column: Any) -> type[Any] | None:
    try:
        return column.type.python_type  # type: ignore[no-any-return]
    except (AttributeError, NotImplementedError):
        return None
