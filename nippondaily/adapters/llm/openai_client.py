"""OpenAI LLM client adapter."""

import json
from typing import Any

from openai import AsyncOpenAI

from nippondaily.adapters.llm.base import AbstractLLMClient

JSON_SYSTEM_PROMPT = "Output JSON only. No extra text or markdown formatting."

_PASSTHROUGH_PARAMS = (
    "max_tokens",
    "top_p",
    "frequency_penalty",
    "presence_penalty",
    "seed",
)


class OpenAIClient(AbstractLLMClient):
    """Client for OpenAI-compatible chat completions.

    Uses the official OpenAI Python SDK with async support.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 45.0,
    ) -> None:
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model

    def _request_params(
        self,
        messages: list[dict[str, str]],
        *,
        default_temperature: float,
        kwargs: dict[str, Any],
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": kwargs.pop("model", None) or self.model,
            "messages": messages,
            "temperature": kwargs.pop("temperature", default_temperature),
        }
        for name in _PASSTHROUGH_PARAMS:
            if name in kwargs:
                params[name] = kwargs[name]
        return params

    async def _complete(self, params: dict[str, Any]) -> str:
        try:
            response = await self.client.chat.completions.create(**params)
            content = response.choices[0].message.content
        except Exception as exc:
            raise RuntimeError(f"OpenAI API error: {str(exc)}") from exc

        if content is None or not content.strip():
            raise RuntimeError("LLM returned empty response")
        return content.strip()

    async def generate_json(
        self,
        prompt: str,
        *,
        schema: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Generate structured JSON using chat completions.

        Args:
            prompt: User prompt to send to the model.
            schema: Optional JSON schema; switches on ``json_object`` response format.
            **kwargs: model, temperature, max_tokens, top_p, etc.

        Returns:
            Parsed JSON value from the LLM response.

        Raises:
            RuntimeError: If the API call fails or the response is not valid JSON.
        """
        messages = [
            {"role": "system", "content": JSON_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        params = self._request_params(messages, default_temperature=0.2, kwargs=kwargs)
        if schema is not None:
            params["response_format"] = {"type": "json_object"}

        content = await self._complete(params)

        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"LLM returned invalid JSON: {str(exc)}") from exc

    async def generate_text(
        self,
        prompt: str,
        *,
        system: str | None = None,
        **kwargs: Any,
    ) -> str:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        params = self._request_params(messages, default_temperature=0.5, kwargs=kwargs)
        return await self._complete(params)
