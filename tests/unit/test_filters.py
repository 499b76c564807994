from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from logbench.domain.models import SearchFilter, SearchMode, total_pages
from logbench.query.builder import (
    FTS_PREDICATE,
    build_predicates,
    like_pattern,
)

USER = uuid.UUID("3f2b8a4e-9c1d-4e5f-8a7b-6c5d4e3f2a1b")


def test_empty_filter_has_no_where_clause():
    predicates = build_predicates(SearchFilter())

    sql, params = predicates.count_sql("pyformat")

    assert sql == "SELECT COUNT(*) FROM logs"
    assert params == []


def test_blank_strings_are_treated_as_absent():
    search_filter = SearchFilter(user_id="", domain="", full_text="", created_at_from="")
    assert build_predicates(search_filter).clauses == []
    assert search_filter.search_mode is None


def test_date_only_upper_bound_covers_whole_day():
    search_filter = SearchFilter(created_at_from="2024-03-01", created_at_to="2024-03-02")

    assert search_filter.created_at_from == date(2024, 3, 1)
    assert search_filter.lower_bound == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert search_filter.upper_bound == datetime(2024, 3, 2, 23, 59, 59, tzinfo=timezone.utc)


def test_full_timestamp_bounds_are_used_verbatim():
    search_filter = SearchFilter(created_at_to="2024-03-02T08:30:00+00:00")
    assert search_filter.upper_bound == datetime(2024, 3, 2, 8, 30, tzinfo=timezone.utc)


def test_malformed_date_is_rejected():
    with pytest.raises(ValidationError):
        SearchFilter(created_at_from="03/01/2024")


def test_unparsable_user_id_is_ignored():
    search_filter = SearchFilter(user_id="not-a-uuid", domain="test.org")

    predicates = build_predicates(search_filter)

    assert search_filter.user_uuid is None
    assert predicates.clauses == ["domain = {}"]
    assert predicates.params == ["test.org"]


def test_search_modes_are_mutually_exclusive():
    with pytest.raises(ValidationError):
        SearchFilter(full_text="login", partial="log")


def test_page_and_limit_must_be_positive():
    with pytest.raises(ValidationError):
        SearchFilter(page=0)
    with pytest.raises(ValidationError):
        SearchFilter(limit=0)


def test_offset_from_page_and_limit():
    assert SearchFilter(page=1, limit=50).offset == 0
    assert SearchFilter(page=3, limit=20).offset == 40


@pytest.mark.parametrize("total,limit,expected", [(0, 50, 0), (50, 50, 1), (51, 50, 2), (7, 3, 3)])
def test_total_pages(total, limit, expected):
    assert total_pages(total, limit) == expected


def test_all_filters_combine_in_order_pyformat():
    search_filter = SearchFilter(
        user_id=str(USER),
        domain="example.com",
        created_at_from="2024-01-01",
        created_at_to="2024-01-31",
        full_text="login",
        page=2,
        limit=10,
    )

    sql, params = build_predicates(search_filter).select_sql("pyformat", limit=10, offset=10)

    assert sql == (
        "SELECT id, user_id, domain, action, content::text, created_at FROM logs "
        "WHERE user_id = %s AND domain = %s AND created_at >= %s AND created_at <= %s "
        "AND to_tsvector('english', content::text) @@ plainto_tsquery('english', %s) "
        "ORDER BY created_at DESC, id DESC LIMIT %s OFFSET %s"
    )
    assert params[0] == USER
    assert params[1] == "example.com"
    assert params[4:] == ["login", 10, 10]
    assert search_filter.search_mode is SearchMode.FTS


def test_numeric_placeholders_for_asyncpg():
    search_filter = SearchFilter(domain="example.com", partial="log")

    count_sql, count_params = build_predicates(search_filter).count_sql("numeric")
    select_sql, select_params = build_predicates(search_filter).select_sql(
        "numeric", limit=5, offset=0
    )

    assert count_sql == (
        "SELECT COUNT(*) FROM logs WHERE domain = $1 AND content::text ILIKE $2"
    )
    assert count_params == ["example.com", "%log%"]
    assert select_sql.endswith("LIMIT $3 OFFSET $4")
    assert select_params == ["example.com", "%log%", 5, 0]


def test_fts_predicate_matches_index_expression():
    assert "to_tsvector('english', content::text)" in FTS_PREDICATE


@pytest.mark.parametrize(
    "term,expected",
    [
        ("login", "%login%"),
        ("100%", "%100\\%%"),
        ("user_id", "%user\\_id%"),
        ("a\\b", "%a\\\\b%"),
        ("ログイン", "%ログイン%"),
    ],
)
def test_like_pattern_escapes_metacharacters(term, expected):
    assert like_pattern(term) == expected
