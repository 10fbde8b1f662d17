from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SearchResult:
    """A single article returned by the news search provider."""

    url: str
    title: str | None = None
    content: str | None = None
    raw_content: str | None = None
    published_date: str | None = None
    score: float | None = None


class AbstractNewsSearchClient(ABC):
    """Interface for news search providers."""

    @abstractmethod
    async def search(
        self,
        query: str,
        *,
        max_results: int = 10,
        time_range: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        **kwargs: Any,
    ) -> list[SearchResult]:
        """Search recent news articles.

        Args:
            query: Free-text search query.
            max_results: Upper bound on returned articles.
            time_range: One of day/week/month/year, or "none"/None for no bound.
            start_date: Inclusive YYYY-MM-DD lower bound.
            end_date: Inclusive YYYY-MM-DD upper bound.
            **kwargs: Provider-specific options.

        Returns:
            list[SearchResult]: Results in provider relevance order.

        Raises:
            SearchAppError: If the provider is not configured or the call fails.
        """
        ...

    async def aclose(self) -> None:
        """Release HTTP resources."""
