"""LLM adapter layer - abstracts over LLM providers."""

from nippondaily.adapters.llm.base import AbstractLLMClient
from nippondaily.adapters.llm.factory import create_llm_client, create_optional_llm_client
from nippondaily.adapters.llm.openai_client import OpenAIClient

__all__ = [
    "AbstractLLMClient",
    "OpenAIClient",
    "create_llm_client",
    "create_optional_llm_client",
]
