"""OpenAI chat completions adapter used by the room summarizer."""

import logging
import time
from typing import Any

from openai import AsyncOpenAI

from app.adapters.llm.base import AbstractLLMClient

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.3
PASSTHROUGH_PARAMS = frozenset({"max_tokens", "top_p", "seed"})


class OpenAIClient(AbstractLLMClient):
    """Chat completions client returning the raw message text.

    JSON salvage is left to the caller; summary output is often wrapped in
    prose or code fences despite instructions.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 45.0,
    ) -> None:
        """Create the underlying AsyncOpenAI client.

        Args:
            api_key: Provider API key.
            model: Chat model used for summaries (e.g. "gpt-4o-mini").
            base_url: Endpoint override for OpenAI-compatible gateways.
            timeout_seconds: Per-request timeout.
        """
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds)
        self.model = model

    async def generate_text(
        self,
        prompt: str,
        *,
        system: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Send one chat turn and return the stripped reply.

        Args:
            prompt: The user message.
            system: Optional system message placed before the prompt.
            **kwargs: ``temperature`` plus any of max_tokens, top_p, seed;
                anything else is ignored.

        Returns:
            Message content with surrounding whitespace removed.

        Raises:
            RuntimeError: If the call fails or the reply is blank.
        """
        messages = [{"role": "system", "content": system}] if system else []
        messages.append({"role": "user", "content": prompt})

        params: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": kwargs.get("temperature", DEFAULT_TEMPERATURE),
        }
        params.update({name: value for name, value in kwargs.items() if name in PASSTHROUGH_PARAMS})

        started = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(**params)
        except Exception as exc:
            logger.warning(
                "llm.request_failed",
                extra={"model": self.model, "error_type": type(exc).__name__},
            )
            raise RuntimeError(f"OpenAI API error: {exc}") from exc

        usage = getattr(response, "usage", None)
        logger.info(
            "llm.completed",
            extra={
                "model": self.model,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                "total_tokens": getattr(usage, "total_tokens", None),
            },
        )

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise RuntimeError("LLM returned empty response")
        return content.strip()
