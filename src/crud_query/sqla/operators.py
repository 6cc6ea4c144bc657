"""
SQLAlchemy strategies for every leaf ``PlanOperator``.

Usage::

    from crud_query.sqla.operators import DEFAULT_SQLA_REGISTRY

    clause = DEFAULT_SQLA_REGISTRY.build(PlanOperator.EQ, Post.user_id, 3)
"""

from __future__ import annotations

import operator as op_module
from typing import TYPE_CHECKING, Any, cast

from ..operators import PlanOperator
from ..utils import LIKE_ESCAPE
from .strategy import SQLAlchemyOperator, SQLAlchemyOperatorRegistry

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.sql.elements import ColumnElement


class _BinaryOperator(SQLAlchemyOperator):
    """``column <op> value`` using a function from :mod:`operator`."""

    compare: Callable[[Any, Any], Any]

    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", type(self).compare(column, value))


class EqualOperator(_BinaryOperator):
    operator = PlanOperator.EQ
    compare = op_module.eq


class GreaterThanOperator(_BinaryOperator):
    operator = PlanOperator.GT
    compare = op_module.gt


class LessThanOperator(_BinaryOperator):
    operator = PlanOperator.LT
    compare = op_module.lt


class GreaterEqualOperator(_BinaryOperator):
    operator = PlanOperator.GTE
    compare = op_module.ge


class LessEqualOperator(_BinaryOperator):
    operator = PlanOperator.LTE
    compare = op_module.le


class InOperator(SQLAlchemyOperator):
    operator = PlanOperator.IN

    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.in_(list(value)))


class BetweenOperator(SQLAlchemyOperator):
    operator = PlanOperator.BETWEEN

    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        low, high = value
        return cast("ColumnElement[bool]", column.between(low, high))


# Patterns arrive already escaped with LIKE_ESCAPE


class LikeOperator(SQLAlchemyOperator):
    operator = PlanOperator.LIKE

    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.like(value, escape=LIKE_ESCAPE))


class ILikeOperator(SQLAlchemyOperator):
    operator = PlanOperator.ILIKE

    def build(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.ilike(value, escape=LIKE_ESCAPE))


def build_default_sqla_registry() -> SQLAlchemyOperatorRegistry:
    """Create a registry covering every leaf operator of a plan."""
    return SQLAlchemyOperatorRegistry(
        EqualOperator(),
        GreaterThanOperator(),
        LessThanOperator(),
        GreaterEqualOperator(),
        LessEqualOperator(),
        InOperator(),
        BetweenOperator(),
        LikeOperator(),
        ILikeOperator(),
    )


DEFAULT_SQLA_REGISTRY: SQLAlchemyOperatorRegistry = build_default_sqla_registry()
