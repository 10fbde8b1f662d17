from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
	"""Interface for LLM clients used for classification, summaries and chat."""

	model: str

	@abstractmethod
	async def generate_json(
		self,
		prompt: str,
		*,
		schema: dict[str, Any] | None = None,
		**kwargs: Any,
	) -> Any:
		"""Generate a structured JSON response from the model.

		Args:
			prompt: User prompt to send to the model.
			schema: Optional JSON schema; enables the provider's JSON mode.
			**kwargs: Provider-specific options (e.g., temperature, max_tokens).

		Returns:
			Parsed JSON value (object or array) returned by the model.

		Raises:
			RuntimeError: If the provider call fails or the response is not valid JSON.
		"""
		...

	@abstractmethod
	async def generate_text(
		self,
		prompt: str,
		*,
		system: str | None = None,
		**kwargs: Any,
	) -> str:
		"""Generate free-form text (summaries, chat replies).

		Raises:
			RuntimeError: If the provider call fails or returns nothing.
		"""
		...
