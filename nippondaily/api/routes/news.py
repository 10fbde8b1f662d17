import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query

from nippondaily.adapters.llm.factory import create_optional_llm_client
from nippondaily.adapters.search.factory import create_search_client
from nippondaily.core.config import settings
from nippondaily.core.errors import AppError, ValidationAppError
from nippondaily.core.rate_limit import enforce_rate_limit
from nippondaily.schemas.news import NewsListResponse
from nippondaily.services.news_classifier import NewsClassifier
from nippondaily.services.news_search_service import NewsSearchService
from nippondaily.services.news_service import NewsService, parse_news_query
from nippondaily.utils.simple_cache import SimpleTTLCache

logger = logging.getLogger(__name__)

router = APIRouter(tags=["News"])

_cache = SimpleTTLCache(
    ttl_seconds=settings.app.cache_ttl_seconds,
    max_entries=settings.app.cache_max_entries,
)
_news_service = NewsService(
    search=NewsSearchService(create_search_client()),
    classifier=NewsClassifier(
        create_optional_llm_client(),
        cache=_cache,
        batch_size=settings.llm.batch_size,
    ),
    model=settings.llm.model,
)


@router.get(
    "/api/news",
    response_model=NewsListResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def get_news(
    category: str | None = Query(None, description="Category filter; 'all' or omitted for every category."),
    time_range: str | None = Query(None, alias="timeRange", description="none, day, week, month or year."),
    limit: str | None = Query(None, description="Maximum number of items (positive integer)."),
    language: str | None = Query(None, description="ISO 639-1 locale code for titles and summaries."),
    start_date: str | None = Query(None, alias="startDate", description="YYYY-MM-DD, requires endDate."),
    end_date: str | None = Query(None, alias="endDate", description="YYYY-MM-DD, requires startDate."),
) -> NewsListResponse:
    """Latest Japan news, categorized and scored.

    Rate limited per client IP to RATE_LIMIT_MAX_REQUESTS per 24 hours.

    Raises:
        ValidationAppError: 400 for an invalid date range.
        HTTPException: 500 when search or classification fails.
    """
    query = parse_news_query(
        category=category,
        time_range=time_range,
        limit=limit,
        language=language,
        start_date=start_date,
        end_date=end_date,
        default_limit=settings.app.default_news_limit,
    )

    try:
        news = await _news_service.fetch_news(query)
    except ValidationAppError:
        raise
    except AppError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to fetch news: {exc.message}")
    except Exception as exc:
        logger.error(
            "news.fetch_failed",
            extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
        )
        raise HTTPException(status_code=500, detail="Failed to fetch news: Unknown error occurred")

    return NewsListResponse(
        data=news,
        count=len(news),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
