"""Shared fixtures for query pipeline tests."""

from __future__ import annotations

from typing import Any

import pytest

from crud_query import (
    FieldPolicy,
    FilterRule,
    PageSizeBounds,
    QueryCompiler,
    QueryIntentParser,
    QueryValidator,
)


@pytest.fixture
def parser() -> QueryIntentParser:
    return QueryIntentParser()


@pytest.fixture
def validator() -> QueryValidator:
    return QueryValidator()


@pytest.fixture
def compiler() -> QueryCompiler:
    return QueryCompiler("postgres")


@pytest.fixture
def posts_policy() -> FieldPolicy:
    """Allowlist of the posts listing endpoint."""
    return FieldPolicy(
        sort_columns={"id", "title", "createdAt", "updatedAt"},
        sort_directions={"asc", "desc"},
        search_columns=("title", "body"),
        filter_rules=(
            FilterRule(field="title", allow={"contains": True}),
            FilterRule(field="userId", allow={"equals": True}, value_type="integer"),
            FilterRule(field="createdAt", allow={"range": {"gte": True, "lte": True}}),
            FilterRule(
                field="score",
                allow={"range": {"gt", "lt", "between"}},
                value_type="integer",
            ),
            FilterRule(field="status", allow={"equals": True, "contains": True}),
        ),
        page_size_bounds=PageSizeBounds(min=1, max=100),
    )


@pytest.fixture(
    params=[
        {},
        {"page": "1e30", "pageSize": "-1", "sortBy": "createdAt", "sortDir": "ASC"},
        {
            "page": "0",
            "pageSize": "500",
            "sortBy": "title",
            "sortDir": "DESC",
            "q": "py",
            "userId[in]": "1,2",
            "createdAt[gte]": "2024-01-01",
            "score[between]": "1,9",
        },
        {
            "userId": ["1", "2"],
            "title[contains]": ["a", "b"],
            "status[contains]": "dr",
            "score[gt]": "1",
            "score[lt]": "9",
            "createdAt[lte]": "2024-12-31",
        },
        {
            "mode": "cursor",
            "cursor": "7",
            "cursorField": "id",
            "direction": "prev",
            "pageSize": "abc",
            "q": "orm",
        },
    ],
    ids=["empty", "offset-extremes", "mixed-filters", "repeated-keys", "cursor"],
)
def posts_params(request: pytest.FixtureRequest) -> dict[str, Any]:
    """Raw query strings the posts endpoint accepts."""
    return request.param
