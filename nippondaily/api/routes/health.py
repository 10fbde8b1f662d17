from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe; does not touch Redis, Tavily or the LLM.

    Returns:
        dict: ``{"status": "ok"}``.
    """

    return {"status": "ok"}
