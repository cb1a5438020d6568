from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
	"""Interface for LLM clients that return the model's raw text output."""

	@abstractmethod
	async def generate_text(
		self,
		prompt: str,
		*,
		system: str | None = None,
		**kwargs: Any,
	) -> str:
		"""Generate a completion for the prompt.

		Output is returned verbatim; models asked for JSON may still wrap it
		in code fences or prose, so callers must salvage it themselves.

		Args:
			prompt: User prompt to send to the model.
			system: Optional system instruction.
			**kwargs: Provider-specific options (e.g., temperature, max_tokens).

		Returns:
			str: Text produced by the model.

		Raises:
			RuntimeError: If the provider call fails or returns no content.
		"""
		...
