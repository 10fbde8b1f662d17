"""Tests for news query parsing and feed assembly."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from nippondaily.core.errors import ValidationAppError
from nippondaily.schemas.news import NewsItem, NewsQuery
from nippondaily.services.news_service import (
    NewsService,
    filter_by_category,
    parse_news_query,
    sort_by_published_desc,
)

TODAY = date(2025, 3, 1)


def _parse(**kwargs) -> NewsQuery:
    return parse_news_query(today=lambda: TODAY, **kwargs)


def _item(title: str, published_at: str, category: str = "Other") -> NewsItem:
    return NewsItem(title=title, published_at=published_at, category=category)


class TestParseNewsQuery:
    def test_defaults(self):
        query = _parse()

        assert query.time_range == "week"
        assert query.limit == 10
        assert query.category is None
        assert query.start_date is None

    @pytest.mark.parametrize("value", ["none", "day", "week", "month", "year"])
    def test_accepts_known_time_ranges(self, value):
        assert _parse(time_range=value).time_range == value

    @pytest.mark.parametrize("value", ["invalid", "", "WEEK", "Day", None])
    def test_unknown_time_range_falls_back_to_week(self, value):
        assert _parse(time_range=value).time_range == "week"

    @pytest.mark.parametrize("value,expected", [("5", 5), ("0", 10), ("-3", 10), ("abc", 10), (None, 10)])
    def test_limit_falls_back_to_default(self, value, expected):
        assert _parse(limit=value).limit == expected

    def test_default_limit_is_configurable(self):
        assert _parse(limit="nope", default_limit=4).limit == 4

    def test_accepts_a_full_year_range(self):
        query = _parse(start_date="2024-01-01", end_date="2024-12-31")

        assert query.start_date == date(2024, 1, 1)
        assert query.end_date == date(2024, 12, 31)

    @pytest.mark.parametrize(
        "start,end",
        [("2024-01-01", None), (None, "2024-01-31")],
    )
    def test_requires_both_dates(self, start, end):
        with pytest.raises(ValidationAppError) as exc_info:
            _parse(start_date=start, end_date=end)

        error = exc_info.value.details["errors"][0]
        assert error["path"] == "startDate"
        assert "Both startDate and endDate must be provided together" in error["message"]

    @pytest.mark.parametrize("start", ["01/01/2024", "not-a-date", "2024-1-01", "2024-02-30"])
    def test_rejects_malformed_dates(self, start):
        with pytest.raises(ValidationAppError) as exc_info:
            _parse(start_date=start, end_date="2024-03-01")

        assert exc_info.value.code == "invalid_query_parameters"
        assert "YYYY-MM-DD" in exc_info.value.details["errors"][0]["message"]

    @pytest.mark.parametrize(
        "start,end",
        [
            ("1999-12-31", "2000-01-01"),
            ("2025-03-02", "2025-03-02"),
            ("2024-12-31", "2024-01-01"),
            ("2024-01-01", "2025-01-02"),
        ],
    )
    def test_rejects_invalid_ranges(self, start, end):
        with pytest.raises(ValidationAppError) as exc_info:
            _parse(start_date=start, end_date=end)

        error = exc_info.value.details["errors"][0]
        assert error["path"] == "startDate"
        assert "Invalid date range" in error["message"]


class TestSortingAndFiltering:
    def test_sorts_newest_first(self):
        items = [
            _item("old", "2025-01-01T00:00:00Z"),
            _item("new", "2025-02-01T00:00:00Z"),
            _item("middle", "2025-01-15T00:00:00+09:00"),
        ]

        assert [i.title for i in sort_by_published_desc(items)] == ["new", "middle", "old"]

    def test_invalid_dates_sort_last_and_keep_their_order(self):
        items = [
            _item("bad-1", "yesterday"),
            _item("good", "2025-02-01T00:00:00Z"),
            _item("bad-2", ""),
        ]

        assert [i.title for i in sort_by_published_desc(items)] == ["good", "bad-1", "bad-2"]

    def test_filter_is_case_insensitive(self):
        items = [_item("a", "2025-01-01", "Technology"), _item("b", "2025-01-01", "Business")]

        assert [i.title for i in filter_by_category(items, "technology")] == ["a"]

    @pytest.mark.parametrize("category", [None, "", "all", "ALL"])
    def test_all_or_missing_category_keeps_everything(self, category):
        items = [_item("a", "2025-01-01", "Technology"), _item("b", "2025-01-01", "Business")]

        assert filter_by_category(items, category) == items


class TestNewsService:
    @pytest.mark.asyncio
    async def test_pipeline_filters_sorts_and_limits(self):
        search = MagicMock()
        search.search_japan_news = AsyncMock(return_value=["raw"])
        classifier = MagicMock()
        classifier.categorize_news_items = AsyncMock(
            return_value=[
                _item("tech-old", "2025-01-01T00:00:00Z", "Technology"),
                _item("biz", "2025-03-01T00:00:00Z", "Business"),
                _item("tech-new", "2025-02-01T00:00:00Z", "Technology"),
                _item("tech-newest", "2025-02-20T00:00:00Z", "technology"),
            ]
        )
        service = NewsService(search, classifier, model="gpt-4o-mini")

        news = await service.fetch_news(
            NewsQuery(category="Technology", time_range="month", limit=2, language="ja")
        )

        assert [n.title for n in news] == ["tech-newest", "tech-new"]
        search.search_japan_news.assert_awaited_once_with(
            max_results=2,
            category="Technology",
            time_range="month",
            start_date=None,
            end_date=None,
        )
        classifier.categorize_news_items.assert_awaited_once_with(
            ["raw"], language="ja", model="gpt-4o-mini"
        )

    @pytest.mark.asyncio
    async def test_all_category_searches_without_category(self):
        search = MagicMock()
        search.search_japan_news = AsyncMock(return_value=[])
        classifier = MagicMock()
        classifier.categorize_news_items = AsyncMock(return_value=[])
        service = NewsService(search, classifier)

        await service.fetch_news(NewsQuery(category="all"))

        assert search.search_japan_news.await_args.kwargs["category"] is None
