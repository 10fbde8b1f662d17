"""On-demand LLM helpers: single-article summaries and chat about the feed."""

from __future__ import annotations

import logging

from nippondaily.adapters.llm.base import AbstractLLMClient
from nippondaily.core.errors import LLMAppError
from nippondaily.schemas.news import NewsItem

logger = logging.getLogger(__name__)

# Keeps chat prompts bounded when the UI sends the whole feed as context.
MAX_CONTEXT_ITEMS = 20
MAX_ITEM_CHARS = 1500

ASSISTANT_SYSTEM_PROMPT = (
    "You are a helpful assistant for a news reader focused on Japan. "
    "Answer using the provided articles when relevant, say so when they do "
    "not cover the question, and keep answers concise."
)


def _article_block(item: NewsItem) -> str:
    body = (item.content or item.summary)[:MAX_ITEM_CHARS]
    return (
        f"Title: {item.title}\n"
        f"Source: {item.source} ({item.published_at})\n"
        f"Category: {item.category}\n"
        f"Content: {body}"
    )


def build_summary_prompt(item: NewsItem) -> str:
    return (
        "Summarize the following news article in 2-3 sentences for a general "
        "audience. Keep names, numbers and dates accurate.\n\n"
        f"{_article_block(item)}"
    )


def build_chat_prompt(message: str, context: list[NewsItem]) -> str:
    articles = "\n\n".join(
        f"[{index}] {_article_block(item)}"
        for index, item in enumerate(context[:MAX_CONTEXT_ITEMS], start=1)
    )
    return (
        f"Current news articles:\n{articles or '(none)'}\n\n"
        f"User question: {message}"
    )


class NewsAssistantService:
    def __init__(self, llm: AbstractLLMClient | None) -> None:
        self.llm = llm

    def _require_llm(self) -> AbstractLLMClient:
        if self.llm is None:
            raise LLMAppError(
                code="llm_not_configured",
                message="LLM client not initialized - API key required",
            )
        return self.llm

    async def summarize_news(self, item: NewsItem) -> str:
        """Return an AI summary for one article.

        Raises:
            LLMAppError: No LLM configured or the provider call failed.
        """
        llm = self._require_llm()
        try:
            return await llm.generate_text(build_summary_prompt(item), system=ASSISTANT_SYSTEM_PROMPT)
        except RuntimeError as exc:
            logger.error("assistant.summary_failed", extra={"error_msg": str(exc)})
            raise LLMAppError(code="summary_failed", message="Failed to summarize news") from exc

    async def chat_about_news(self, message: str, context: list[NewsItem]) -> str:
        """Answer a user question grounded on the articles currently shown.

        Raises:
            LLMAppError: No LLM configured or the provider call failed.
        """
        llm = self._require_llm()
        try:
            reply = await llm.generate_text(
                build_chat_prompt(message, context),
                system=ASSISTANT_SYSTEM_PROMPT,
            )
        except RuntimeError as exc:
            logger.error(
                "assistant.chat_failed",
                extra={"error_msg": str(exc), "context_items": len(context)},
            )
            raise LLMAppError(code="chat_failed", message="Failed to process chat message") from exc

        logger.info("assistant.chat_answered", extra={"context_items": len(context)})
        return reply
