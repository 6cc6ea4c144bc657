"""SQLAlchemy execution of query plans."""

from __future__ import annotations

from .compiler import (
    SQLAlchemyPlanAdapter,
    apply_plan,
    build_order_by,
    build_sqla_filter,
    resolve_column,
)
from .executor import PlanExecutor
from .operators import DEFAULT_SQLA_REGISTRY, build_default_sqla_registry
from .strategy import SQLAlchemyOperator, SQLAlchemyOperatorRegistry

__all__ = [
    "DEFAULT_SQLA_REGISTRY",
    "PlanExecutor",
    "SQLAlchemyOperator",
    "SQLAlchemyOperatorRegistry",
    "SQLAlchemyPlanAdapter",
    "apply_plan",
    "build_default_sqla_registry",
    "build_order_by",
    "build_sqla_filter",
    "resolve_column",
]
