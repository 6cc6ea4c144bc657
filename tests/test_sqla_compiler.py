"""Tests for compiling QueryPlans into SQLAlchemy constructs."""

from __future__ import annotations

import datetime
from typing import Any, cast

import pytest
from sqlalchemy import ColumnElement, DateTime, Integer, String, select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from crud_query import (
    And,
    Comparison,
    IPlanAdapter,
    Or,
    OrderItem,
    PlanOperator,
    QueryPlan,
    SortDirection,
)
from crud_query.sqla import (
    DEFAULT_SQLA_REGISTRY,
    SQLAlchemyOperator,
    SQLAlchemyOperatorRegistry,
    SQLAlchemyPlanAdapter,
    apply_plan,
    build_order_by,
    build_sqla_filter,
    resolve_column,
)


class Base(DeclarativeBase):
    pass


class PostRecord(Base):
    __tablename__ = "posts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String)
    user_id: Mapped[int] = mapped_column(Integer)
    score: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime)


FIELD_MAP = {"userId": "user_id", "createdAt": "created_at"}


def test_equals_is_bound_and_coerced() -> None:
    expr = build_sqla_filter(
        PostRecord, Comparison("userId", PlanOperator.EQ, "3"), field_map=FIELD_MAP
    )
    compiled = expr.compile()
    assert str(compiled) == "posts.user_id = :user_id_1"
    assert compiled.params == {"user_id_1": 3}


def test_between() -> None:
    expr = build_sqla_filter(
        PostRecord, Comparison("score", PlanOperator.BETWEEN, ("1", "5"))
    )
    compiled = expr.compile()
    assert str(compiled) == "posts.score BETWEEN :score_1 AND :score_2"
    assert compiled.params == {"score_1": 1, "score_2": 5}


def test_in() -> None:
    expr = build_sqla_filter(
        PostRecord,
        Comparison("userId", PlanOperator.IN, ("1", "2")),
        field_map=FIELD_MAP,
    )
    assert "posts.user_id IN" in str(expr.compile())


def test_like_patterns_are_not_coerced_and_use_escape() -> None:
    expr = build_sqla_filter(
        PostRecord, Comparison("title", PlanOperator.ILIKE, "%50\\%%")
    )
    compiled = expr.compile()
    text = str(compiled)
    assert "lower(posts.title) LIKE lower(:title_1)" in text
    assert "ESCAPE" in text
    assert compiled.params == {"title_1": "%50\\%%"}


def test_nested_groups() -> None:
    tree = And(
        (
            Comparison("userId", PlanOperator.EQ, 1),
            Or(
                (
                    Comparison("title", PlanOperator.LIKE, "%a%"),
                    Comparison("score", PlanOperator.GT, 3),
                )
            ),
        )
    )
    text = str(build_sqla_filter(PostRecord, tree, field_map=FIELD_MAP).compile())
    assert text.startswith("posts.user_id = :user_id_1 AND (")
    assert " OR posts.score > :score_1" in text


def test_unknown_field_raises() -> None:
    with pytest.raises(AttributeError, match="has no attribute password"):
        resolve_column(PostRecord, "password")


def test_unregistered_operator_raises() -> None:
    with pytest.raises(ValueError, match="Unsupported operator"):
        build_sqla_filter(
            PostRecord,
            Comparison("id", PlanOperator.EQ, 1),
            registry=SQLAlchemyOperatorRegistry(),
        )


def test_default_registry_covers_every_leaf_operator() -> None:
    leaf_operators = set(PlanOperator) - {PlanOperator.AND, PlanOperator.OR}
    assert DEFAULT_SQLA_REGISTRY.supported_operators == leaf_operators


def test_registry_strategy_can_be_replaced() -> None:
    class CaseSensitiveContains(SQLAlchemyOperator):
        operator = PlanOperator.ILIKE

        def build(self, column: Any, value: Any) -> ColumnElement[bool]:
            return cast("ColumnElement[bool]", column.like(value))

    registry = DEFAULT_SQLA_REGISTRY.copy()
    registry.register(CaseSensitiveContains())

    leaf = Comparison("title", PlanOperator.ILIKE, "%a%")
    assert str(build_sqla_filter(PostRecord, leaf, registry=registry).compile()) == (
        "posts.title LIKE :title_1"
    )
    assert "lower(" in str(build_sqla_filter(PostRecord, leaf).compile())
    assert PlanOperator.ILIKE in registry


def test_order_by() -> None:
    clauses = build_order_by(
        PostRecord,
        (OrderItem("createdAt", SortDirection.DESC), OrderItem("id")),
        field_map=FIELD_MAP,
    )
    assert [str(c) for c in clauses] == ["posts.created_at DESC", "posts.id ASC"]


def test_apply_plan() -> None:
    plan = QueryPlan(
        predicate=Comparison("userId", PlanOperator.EQ, 3),
        order=(OrderItem("id", SortDirection.DESC),),
        limit=10,
        offset=20,
    )
    stmt = apply_plan(select(PostRecord), PostRecord, plan, field_map=FIELD_MAP)
    text = str(stmt)
    assert "WHERE posts.user_id = :user_id_1" in text
    assert "ORDER BY posts.id DESC" in text
    assert "LIMIT :param_1 OFFSET :param_2" in text


def test_plan_adapter() -> None:
    adapter = SQLAlchemyPlanAdapter(PostRecord, field_map=FIELD_MAP)
    assert isinstance(adapter, IPlanAdapter)

    plan = QueryPlan(
        predicate=None, order=(OrderItem("createdAt", SortDirection.DESC),), limit=5
    )
    text = str(adapter.to_backend_query(plan))
    assert "WHERE" not in text
    assert "ORDER BY posts.created_at DESC" in text
    assert "OFFSET" not in text
