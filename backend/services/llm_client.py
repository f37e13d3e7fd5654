"""
Completion Client - wraps the OpenAI SDK chat completions endpoint.

Every request handler reaches the language model through this client:
    complete(messages) -> reply text
    ask(prompt)        -> reply text for a single user message

Failures (timeouts, quota, transport, empty replies) are raised as LLMError
so each call site can decide its own fallback.
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Optional

import openai
from openai import AsyncOpenAI

from errors import LLMError
from logging_config import log_llm

logger = logging.getLogger(__name__)


def _translate_messages_for_openai(messages: Iterable[Any]) -> List[Dict[str, str]]:
    """Translate internal messages (dicts or Turn-like objects) to OpenAI format."""
    translated = []
    for msg in messages:
        if isinstance(msg, dict):
            role = msg.get("role", "user")
            content = msg.get("content", "")
        else:
            role = getattr(msg, "role", "user")
            content = getattr(msg, "content", "")
        translated.append({"role": str(role), "content": content or ""})
    return translated


class CompletionClient:
    """Async chat-completion client bound to one default model."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        temperature: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Args:
            api_key: Completion service API key
            model: Default model identifier
            base_url: Optional OpenAI-compatible endpoint
            timeout: Request timeout in seconds
            temperature: Default sampling temperature (None = provider default)
            client: Pre-built AsyncOpenAI instance (tests)
        """
        self.model = model
        self.temperature = temperature
        self._openai = client or AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def complete(
        self,
        messages: Iterable[Any],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Send an ordered message list and return the stripped reply text.

        Raises:
            LLMError: On timeout, API failure, or an empty reply
        """
        model = model or self.model
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": _translate_messages_for_openai(messages),
        }
        temp = temperature if temperature is not None else self.temperature
        if temp is not None:
            kwargs["temperature"] = temp

        log_llm(logger, "start", model=model)
        started = time.monotonic()
        try:
            response = await self._openai.chat.completions.create(**kwargs)
        except openai.APITimeoutError as e:
            raise LLMError("Completion request timed out", details=str(e), model=model, error_type="timeout") from e
        except openai.OpenAIError as e:
            raise LLMError("Completion request failed", details=str(e), model=model) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise LLMError("Malformed completion response", model=model, error_type="invalid") from e

        if not content or not content.strip():
            raise LLMError("Empty completion response", model=model, error_type="invalid")

        log_llm(logger, "end", model=model, duration=time.monotonic() - started)
        return content.strip()

    async def ask(self, prompt: str, model: Optional[str] = None) -> str:
        """Single-turn helper: send ``prompt`` as one user message."""
        return await self.complete([{"role": "user", "content": prompt}], model=model)

    async def close(self) -> None:
        await self._openai.close()
