"""News search orchestration: query building and result shaping."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from urllib.parse import urlparse

from nippondaily.adapters.search.base import AbstractNewsSearchClient, SearchResult
from nippondaily.schemas.news import NewsItem

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "latest Japan news"
ALL_CATEGORIES = "all"
UNCATEGORIZED = "Other"

SOURCE_NAMES: dict[str, str] = {
    "nhk.or.jp": "NHK",
    "japantimes.co.jp": "Japan Times",
    "nikkei.com": "Nikkei",
    "asahi.com": "Asahi Shimbun",
    "mainichi.jp": "Mainichi Shimbun",
    "yomiuri.co.jp": "Yomiuri Shimbun",
    "reuters.com": "Reuters",
    "nytimes.com": "New York Times",
    "fortune.com": "Fortune",
    "autonews.com": "Automotive News",
}


def build_search_query(category: str | None = None) -> str:
    if category and category.lower() != ALL_CATEGORIES:
        return f"latest {category} news Japan"
    return DEFAULT_QUERY


def resolve_source_name(url: str | None) -> str:
    """Map an article URL to a friendly outlet name.

    Known outlets (including their subdomains) get their display name, any
    other URL its hostname, and an unparseable URL ``"Unknown"``.
    """
    if not url:
        return "Unknown"
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return "Unknown"
    if not hostname:
        return "Unknown"

    for domain, name in SOURCE_NAMES.items():
        if hostname == domain or hostname.endswith(f".{domain}"):
            return name
    return hostname


def format_search_results(results: list[SearchResult]) -> list[NewsItem]:
    """Shape raw search results into uncategorized news items."""
    now = datetime.now(timezone.utc).isoformat()
    items: list[NewsItem] = []
    for result in results:
        content = result.content or ""
        items.append(
            NewsItem(
                title=result.title or "Untitled",
                summary=content,
                content=content,
                raw_content=result.raw_content,
                source=resolve_source_name(result.url),
                published_at=result.published_date or now,
                category=UNCATEGORIZED,
                url=result.url or None,
            )
        )
    return items


class NewsSearchService:
    """Fetches Japan news from the search provider as NewsItem objects."""

    def __init__(self, client: AbstractNewsSearchClient) -> None:
        self.client = client

    async def search_japan_news(
        self,
        *,
        max_results: int,
        category: str | None = None,
        time_range: str = "week",
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[NewsItem]:
        """Search and format news.

        Raises:
            SearchAppError: Provider not configured or the request failed.
        """
        query = build_search_query(category)
        results = await self.client.search(
            query,
            max_results=max_results,
            time_range=time_range,
            start_date=start_date.isoformat() if start_date else None,
            end_date=end_date.isoformat() if end_date else None,
        )
        logger.info(
            "news_search.results",
            extra={
                "query": query,
                "result_count": len(results),
                "max_results": max_results,
            },
        )
        return format_search_results(results)
