from __future__ import annotations

from nippondaily.api.routes.assistant import router as assistant_router
from nippondaily.api.routes.health import router as health_router
from nippondaily.api.routes.news import router as news_router

__all__ = ["assistant_router", "health_router", "news_router"]
