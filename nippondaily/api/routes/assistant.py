from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from nippondaily.adapters.llm.factory import create_optional_llm_client
from nippondaily.core.errors import LLMAppError
from nippondaily.schemas.news import (
    ChatRequest,
    ChatResponse,
    SummarizeRequest,
    SummarizeResponse,
    SummaryPayload,
)
from nippondaily.services.news_assistant_service import NewsAssistantService

router = APIRouter(tags=["Assistant"])

_assistant_service = NewsAssistantService(llm=create_optional_llm_client())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/api/summarize", response_model=SummarizeResponse)
async def summarize_news(payload: SummarizeRequest) -> SummarizeResponse:
    """Summarize a single article with the LLM.

    Raises:
        HTTPException: 500 if the LLM is unavailable or fails.
    """
    try:
        ai_summary = await _assistant_service.summarize_news(payload.news_item)
    except LLMAppError as exc:
        raise HTTPException(status_code=500, detail=exc.message)

    return SummarizeResponse(
        data=SummaryPayload(
            original_summary=payload.news_item.summary,
            ai_summary=ai_summary,
        ),
        timestamp=_now(),
    )


@router.post("/api/chat", response_model=ChatResponse)
async def chat_about_news(payload: ChatRequest) -> ChatResponse:
    """Answer a question about the articles currently shown in the UI.

    Raises:
        HTTPException: 500 if the LLM is unavailable or fails.
    """
    try:
        reply = await _assistant_service.chat_about_news(payload.message, payload.news_context)
    except LLMAppError as exc:
        raise HTTPException(status_code=500, detail=exc.message)

    return ChatResponse(data=reply, timestamp=_now())
