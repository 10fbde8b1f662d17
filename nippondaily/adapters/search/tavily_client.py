"""Tavily search REST client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from nippondaily.adapters.search.base import AbstractNewsSearchClient, SearchResult
from nippondaily.core.errors import SearchAppError

logger = logging.getLogger(__name__)

NO_TIME_RANGE = "none"


class TavilySearchClient(AbstractNewsSearchClient):
    """Async client for ``POST /search`` on the Tavily API.

    Always searches the ``news`` topic with advanced depth and asks for the
    article body as markdown, which the classifier uses as LLM input.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://api.tavily.com",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        timeout = httpx.Timeout(timeout_seconds, connect=min(10.0, timeout_seconds))
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _build_payload(
        self,
        query: str,
        *,
        max_results: int,
        time_range: str | None,
        start_date: str | None,
        end_date: str | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "query": query,
            "topic": "news",
            "max_results": max_results,
            "search_depth": "advanced",
            "include_raw_content": "markdown",
        }
        if start_date and end_date:
            payload["start_date"] = start_date
            payload["end_date"] = end_date
        elif time_range and time_range != NO_TIME_RANGE:
            payload["time_range"] = time_range
        return payload

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
        if not self.api_key:
            raise SearchAppError(
                code="search_not_configured",
                message="Tavily client not initialized - API key required",
            )

        payload = self._build_payload(
            query,
            max_results=max_results,
            time_range=time_range,
            start_date=start_date,
            end_date=end_date,
        )

        try:
            response = await self._client.post(
                f"{self.base_url}/search",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError("Tavily response is not a JSON object")
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "search.request_failed",
                extra={
                    "provider": "tavily",
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise SearchAppError(
                code="search_failed",
                message="Failed to search news with Tavily API",
                details={"provider": "tavily"},
            ) from exc

        results = [
            SearchResult(
                url=item.get("url") or "",
                title=item.get("title"),
                content=item.get("content"),
                raw_content=item.get("raw_content"),
                published_date=item.get("published_date"),
                score=item.get("score"),
            )
            for item in data.get("results") or []
            if isinstance(item, dict)
        ]

        logger.info(
            "search.completed",
            extra={
                "provider": "tavily",
                "result_count": len(results),
                "time_range": payload.get("time_range"),
                "has_date_range": "start_date" in payload,
            },
        )
        return results
