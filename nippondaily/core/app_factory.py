"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from nippondaily.api.routes import assistant_router, health_router, news_router
from nippondaily.core.config import settings
from nippondaily.core.exception_handlers import setup_exception_handlers
from nippondaily.core.logging import configure_logging
from nippondaily.core.middleware import request_id_middleware


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="NipponDaily API",
        description=(
            "Latest news about Japan, gathered with Tavily search and "
            "categorized, translated and credibility-scored by an LLM. "
            "GET /api/news is limited per client IP to a daily quota backed "
            "by Redis."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(news_router)
    app.include_router(assistant_router)
    app.include_router(health_router)

    return app
