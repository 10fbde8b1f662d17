"""News search adapter layer."""

from nippondaily.adapters.search.base import AbstractNewsSearchClient, SearchResult
from nippondaily.adapters.search.factory import create_search_client
from nippondaily.adapters.search.tavily_client import TavilySearchClient

__all__ = [
    "AbstractNewsSearchClient",
    "SearchResult",
    "TavilySearchClient",
    "create_search_client",
]
