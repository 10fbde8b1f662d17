"""News feed orchestration for ``GET /api/news``.

Pipeline: validate query -> search -> classify -> filter by category ->
sort newest first -> slice to limit.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from typing import Callable

from pydantic import ValidationError

from nippondaily.core.errors import ValidationAppError
from nippondaily.schemas.news import NewsItem, NewsQuery
from nippondaily.services.news_classifier import NewsClassifier
from nippondaily.services.news_search_service import ALL_CATEGORIES, NewsSearchService

logger = logging.getLogger(__name__)

TIME_RANGES = ("none", "day", "week", "month", "year")
DEFAULT_TIME_RANGE = "week"
MIN_START_DATE = date(2000, 1, 1)
MAX_RANGE_DAYS = 365
INVALID_RANGE_MESSAGE = "Invalid date range"

_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _invalid_query(path: str, message: str) -> ValidationAppError:
    return ValidationAppError(
        code="invalid_query_parameters",
        message="Invalid query parameters",
        details={"errors": [{"path": path, "message": message}]},
    )


def _parse_iso_date(value: str, path: str) -> date:
    try:
        if not _ISO_DATE_RE.fullmatch(value):
            raise ValueError(value)
        return date.fromisoformat(value)
    except ValueError:
        raise _invalid_query(path, "Date must be in YYYY-MM-DD format") from None


def _parse_limit(raw: str | None, default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default


def parse_news_query(
    *,
    category: str | None = None,
    time_range: str | None = None,
    limit: str | None = None,
    language: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    default_limit: int = 10,
    today: Callable[[], date] | None = None,
) -> NewsQuery:
    """Parse raw query-string values into a NewsQuery.

    ``timeRange`` and ``limit`` are lenient (unknown values fall back to
    defaults); the date range is strict.

    Raises:
        ValidationAppError: Only one date given, a date not in YYYY-MM-DD,
            or a range that starts before 2000-01-01, lies in the future,
            is reversed, or spans more than 365 days.
    """
    resolved_range = time_range if time_range in TIME_RANGES else DEFAULT_TIME_RANGE

    start: date | None = None
    end: date | None = None
    if start_date or end_date:
        if not (start_date and end_date):
            raise _invalid_query("startDate", "Both startDate and endDate must be provided together")
        start = _parse_iso_date(start_date, "startDate")
        end = _parse_iso_date(end_date, "endDate")

        current = (today or (lambda: datetime.now(timezone.utc).date()))()
        if (
            start < MIN_START_DATE
            or end > current
            or start > end
            or (end - start).days > MAX_RANGE_DAYS
        ):
            raise _invalid_query(
                "startDate",
                f"{INVALID_RANGE_MESSAGE}: dates must be between {MIN_START_DATE.isoformat()} "
                f"and today, startDate must not be after endDate, and the range must not "
                f"exceed {MAX_RANGE_DAYS} days",
            )

    try:
        return NewsQuery(
            category=category or None,
            time_range=resolved_range,
            limit=_parse_limit(limit, default_limit),
            language=language or None,
            start_date=start,
            end_date=end,
        )
    except ValidationError as exc:
        raise _invalid_query("query", str(exc)) from exc


def _published_timestamp(item: NewsItem) -> float:
    try:
        parsed = datetime.fromisoformat(item.published_at.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def sort_by_published_desc(items: list[NewsItem]) -> list[NewsItem]:
    """Newest first; unparseable dates sort last, ties keep input order."""
    return sorted(items, key=_published_timestamp, reverse=True)


def filter_by_category(items: list[NewsItem], category: str | None) -> list[NewsItem]:
    if not category or category.lower() == ALL_CATEGORIES:
        return items
    wanted = category.lower()
    return [item for item in items if item.category.lower() == wanted]


class NewsService:
    """Builds the news feed from search results and LLM classification."""

    def __init__(self, search: NewsSearchService, classifier: NewsClassifier, *, model: str | None = None) -> None:
        self.search = search
        self.classifier = classifier
        self.model = model

    async def fetch_news(self, query: NewsQuery) -> list[NewsItem]:
        """Run the full pipeline for a validated query.

        Raises:
            SearchAppError: The search provider is missing or failed.
        """
        category = None if (query.category or "").lower() == ALL_CATEGORIES else query.category

        news = await self.search.search_japan_news(
            max_results=query.limit,
            category=category,
            time_range=query.time_range,
            start_date=query.start_date,
            end_date=query.end_date,
        )
        news = await self.classifier.categorize_news_items(
            news,
            language=query.language,
            model=self.model,
        )
        news = filter_by_category(news, category)
        news = sort_by_published_desc(news)[: query.limit]

        logger.info(
            "news.fetched",
            extra={
                "category": category or ALL_CATEGORIES,
                "time_range": query.time_range,
                "count": len(news),
                "limit": query.limit,
            },
        )
        return news
