"""Factory for the news search client."""

from nippondaily.adapters.search.base import AbstractNewsSearchClient
from nippondaily.adapters.search.tavily_client import TavilySearchClient
from nippondaily.core.config import settings


def create_search_client() -> AbstractNewsSearchClient:
    """Build the Tavily client from settings.

    A missing TAVILY_API_KEY is not fatal here: the client raises
    SearchAppError on first use so the app can still boot and serve /health.
    """
    return TavilySearchClient(
        api_key=settings.search.api_key,
        base_url=settings.search.base_url,
        timeout_seconds=settings.search.timeout_seconds,
    )
