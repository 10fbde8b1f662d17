"""Factory for LLM client instances."""

import logging

from nippondaily.adapters.llm.base import AbstractLLMClient
from nippondaily.adapters.llm.openai_client import OpenAIClient
from nippondaily.core.config import settings
from nippondaily.core.errors import ValidationAppError

logger = logging.getLogger(__name__)


def create_llm_client() -> AbstractLLMClient:
    """Instantiate the configured LLM client.

    Returns:
        AbstractLLMClient: Configured LLM client instance.

    Raises:
        ValidationAppError: Missing API key or unknown provider.
    """
    provider = settings.llm.provider.lower()

    if provider == "openai":
        if not settings.llm.api_key:
            raise ValidationAppError(
                code="llm_missing_api_key",
                message="OpenAI provider requires LLM_API_KEY environment variable",
            )
        return OpenAIClient(
            api_key=settings.llm.api_key,
            model=settings.llm.model,
            base_url=settings.llm.base_url,
            timeout_seconds=settings.llm.timeout_seconds,
        )

    raise ValidationAppError(
        code="llm_unknown_provider",
        message=f"Unknown LLM provider: '{provider}'. Supported providers: openai",
        details={"provider": provider},
    )


def create_optional_llm_client() -> AbstractLLMClient | None:
    """Like create_llm_client(), but returns None when the LLM is not configured.

    Classification degrades to uncategorized items without an LLM, so a
    missing key must not prevent the app from starting.
    """
    try:
        return create_llm_client()
    except ValidationAppError as exc:
        logger.warning(
            "llm.disabled",
            extra={"error_code": exc.code, "provider": settings.llm.provider},
        )
        return None
