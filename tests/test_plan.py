"""Tests for the QueryPlan predicate tree."""

from __future__ import annotations

from crud_query import (
    And,
    Comparison,
    Or,
    OrderItem,
    PlanOperator,
    QueryPlan,
    SortDirection,
    and_all,
    or_any,
)

A = Comparison("a", PlanOperator.EQ, 1)
B = Comparison("b", PlanOperator.GT, 2)
C = Comparison("c", PlanOperator.LIKE, "%x%")


def test_and_all_drops_absent_parts() -> None:
    assert and_all([]) is None
    assert and_all([None, None]) is None
    assert and_all([None, A]) == A


def test_and_all_flattens_nested_ands() -> None:
    assert and_all([And((A, B)), None, C]) == And((A, B, C))


def test_or_any_keeps_nested_groups() -> None:
    assert or_any([None]) is None
    assert or_any([A]) == A
    assert or_any([A, And((B, C))]) == Or((A, And((B, C))))


def test_and_never_flattens_or() -> None:
    assert and_all([Or((A, B)), C]) == And((Or((A, B)), C))


def test_predicate_to_dict() -> None:
    tree = And((A, Or((B, Comparison("d", PlanOperator.IN, (1, 2))))))
    assert tree.to_dict() == {
        "op": "and",
        "conditions": [
            {"op": "eq", "attr": "a", "val": 1},
            {
                "op": "or",
                "conditions": [
                    {"op": "gt", "attr": "b", "val": 2},
                    {"op": "in", "attr": "d", "val": [1, 2]},
                ],
            },
        ],
    }


def test_order_item_parse_and_invert() -> None:
    item = OrderItem.parse(" -createdAt ")
    assert item == OrderItem("createdAt", SortDirection.DESC)
    assert item.descending
    assert item.inverted() == OrderItem("createdAt", SortDirection.ASC)
    assert OrderItem.parse("id") == OrderItem("id", SortDirection.ASC)


def test_plan_fields() -> None:
    plan = QueryPlan(
        predicate=And((A, Or((B, C)))),
        order=(OrderItem("createdAt", SortDirection.DESC),),
        limit=10,
    )
    assert plan.fields() == {"a", "b", "c", "createdAt"}


def test_cursor_plan_to_dict() -> None:
    cursor = Comparison("id", PlanOperator.LT, 50)
    plan = QueryPlan(
        predicate=cursor,
        order=(OrderItem("id", SortDirection.DESC),),
        limit=10,
        cursor_predicate=cursor,
        cursor_field="id",
    )
    assert plan.is_cursor
    assert plan.to_dict() == {
        "order": [["id", "desc"]],
        "limit": 10,
        "where": {"op": "lt", "attr": "id", "val": 50},
        "cursor": {"op": "lt", "attr": "id", "val": 50},
    }
