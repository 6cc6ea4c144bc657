"""Tests for QueryIntentParser."""

from __future__ import annotations

from crud_query import (
    ContainsFilter,
    CursorDirection,
    CursorPagination,
    EqualsFilter,
    OffsetPagination,
    QueryIntentParser,
    RangeFilter,
    RangeOperator,
    UnsupportedFilter,
    parse_query,
)


def test_defaults_for_empty_params(parser: QueryIntentParser) -> None:
    intent = parser.parse({})
    assert intent.pagination == OffsetPagination(page=1, page_size=20)
    assert intent.sort.sort_by is None
    assert intent.sort.sort_dir == "asc"
    assert intent.search is None
    assert intent.filters.entries == ()


def test_lenient_numbers_fall_back(parser: QueryIntentParser) -> None:
    intent = parser.parse({"page": "abc", "pageSize": "0"})
    assert intent.pagination == OffsetPagination(page=1, page_size=20)


def test_negative_page_passes_through(parser: QueryIntentParser) -> None:
    intent = parser.parse({"page": "-3", "pageSize": "9999"})
    assert isinstance(intent.pagination, OffsetPagination)
    assert intent.pagination.page == -3
    assert intent.pagination.page_size == 9999


def test_default_page_size_is_configurable() -> None:
    intent = parse_query({}, default_page_size=50)
    assert intent.pagination.page_size == 50


def test_cursor_mode(parser: QueryIntentParser) -> None:
    intent = parser.parse(
        {
            "mode": "cursor",
            "cursor": "10",
            "cursorField": "id",
            "direction": "prev",
            "pageSize": "5",
        }
    )
    assert intent.pagination == CursorPagination(
        page_size=5, cursor="10", cursor_field="id", direction=CursorDirection.PREV
    )


def test_unknown_mode_is_offset(parser: QueryIntentParser) -> None:
    intent = parser.parse({"mode": "keyset", "cursor": "10"})
    assert isinstance(intent.pagination, OffsetPagination)


def test_unknown_direction_is_next(parser: QueryIntentParser) -> None:
    intent = parser.parse({"mode": "cursor", "direction": "sideways"})
    assert isinstance(intent.pagination, CursorPagination)
    assert intent.pagination.direction is CursorDirection.NEXT
    assert intent.pagination.cursor is None


def test_sort_and_search(parser: QueryIntentParser) -> None:
    intent = parser.parse({"sortBy": "title", "sortDir": "DESC", "q": "hello"})
    assert intent.sort.sort_by == "title"
    assert intent.sort.sort_dir == "DESC"
    assert intent.search is not None
    assert intent.search.q == "hello"
    assert intent.search.columns == ()


def test_empty_q_means_no_search(parser: QueryIntentParser) -> None:
    assert parser.parse({"q": ""}).search is None


def test_filters_are_bucketed(parser: QueryIntentParser) -> None:
    intent = parser.parse(
        {
            "userId[equals]": "3",
            "status": "draft",
            "title[contains]": "python",
            "createdAt[gte]": "2024-01-01",
            "createdAt[lte]": "2024-12-31",
            "score[between]": "1,5",
        }
    )
    assert intent.filters.equals == {"userId": "3", "status": "draft"}
    assert intent.filters.contains == {"title": "python"}
    assert intent.filters.range == {
        "createdAt": {"gte": "2024-01-01", "lte": "2024-12-31"},
        "score": {"between": ("1", "5")},
    }


def test_range_sub_operators_merge_into_one_entry(parser: QueryIntentParser) -> None:
    intent = parser.parse({"createdAt[gte]": "a", "title": "x", "createdAt[lt]": "b"})
    ranges = intent.filters.of_type(RangeFilter)
    assert len(ranges) == 1
    assert [b.operator for b in ranges[0].bounds] == [RangeOperator.GTE, RangeOperator.LT]
    # Range entry keeps the position of its first key
    assert isinstance(intent.filters.entries[0], RangeFilter)


def test_repeated_keys_become_lists(parser: QueryIntentParser) -> None:
    intent = parser.parse({"status": ["draft", "published"], "title[contains]": ["a", "b"]})
    assert EqualsFilter("status", ("draft", "published")) in intent.filters.entries
    assert ContainsFilter("title", ("a", "b")) in intent.filters.entries


def test_in_operator_splits_commas(parser: QueryIntentParser) -> None:
    intent = parser.parse({"userId[in]": "1,2,3"})
    assert intent.filters.entries == (EqualsFilter("userId", ("1", "2", "3")),)


def test_between_keeps_raw_arity(parser: QueryIntentParser) -> None:
    intent = parser.parse({"score[between]": "1,2,3"})
    assert intent.filters.range == {"score": {"between": ("1", "2", "3")}}


def test_unknown_operator_is_recorded(parser: QueryIntentParser) -> None:
    intent = parser.parse({"title[regex]": ".*"})
    assert intent.filters.entries == (UnsupportedFilter("title", "regex"),)


def test_multidict_getlist_is_used() -> None:
    class MultiDict(dict):
        def getlist(self, key: str) -> list[str]:
            return ["1", "2"] if key == "userId" else [self[key]]

    intent = QueryIntentParser().parse(MultiDict({"userId": "2", "page": "3"}))
    assert intent.filters.equals == {"userId": ("1", "2")}
    assert intent.pagination == OffsetPagination(page=3, page_size=20)


def test_reserved_keys_are_never_filters(parser: QueryIntentParser) -> None:
    intent = parser.parse({"page": "2", "mode": "offset", "direction": "next"})
    assert intent.filters.entries == ()
