"""Inference provider abstraction with retry logic.

Every backend exposes ``complete()`` returning a CompletionResult. The
swarm only talks to ``chat()``, which returns the raw completion text or
raises InferenceError.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol, runtime_checkable

from ..models.provider import ChatMessage, CompletionResult
from ..utils.sanitize import sanitize_error


class InferenceError(Exception):
    """The backend could not produce a completion."""


@runtime_checkable
class InferenceProvider(Protocol):
    """Protocol that the agent workflow depends on."""

    name: str

    async def chat(
        self,
        model: str,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
        seed: Optional[int] = None,
    ) -> str: ...


class BaseProvider:
    """Base class with shared retry logic and config handling."""

    name: str = "base"

    def __init__(self, provider_config: dict, common_config: dict):
        self.config = provider_config
        self.common = common_config
        self.max_attempts = max(1, int(common_config.get("retry_attempts", 1)))
        self.retry_delay = common_config.get("retry_delay_seconds", 5)
        self.timeout = common_config.get("timeout_seconds", 120)

    async def complete(
        self,
        model: str,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
        seed: Optional[int] = None,
    ) -> CompletionResult:
        raise NotImplementedError

    async def complete_with_retry(
        self,
        model: str,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
        seed: Optional[int] = None,
    ) -> CompletionResult:
        """Wrap complete() with retry on rate limits and transient errors."""
        last_result: Optional[CompletionResult] = None

        for attempt in range(1, self.max_attempts + 1):
            result = await self.complete(model, messages, max_tokens, temperature, seed)
            last_result = result

            if result.success:
                return result

            error_msg = result.error or ""
            is_rate_limit = "429" in error_msg
            is_retryable = (
                is_rate_limit
                or any(
                    code in error_msg
                    for code in ("500", "502", "503", "504", "timeout", "timed out")
                )
            ) and not any(
                code in error_msg
                for code in ("400", "401", "403", "404")
            )

            if not is_retryable or attempt >= self.max_attempts:
                result.error = sanitize_error(error_msg)
                return result

            # Rate limits: 30s base. Others: standard backoff.
            base_delay = 30 if is_rate_limit else self.retry_delay
            await asyncio.sleep(base_delay * min(attempt, 3))

        return last_result or CompletionResult(success=False, error="Max retries exceeded")

    async def chat(
        self,
        model: str,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
        seed: Optional[int] = None,
    ) -> str:
        """Return the completion text, raising InferenceError on failure."""
        result = await self.complete_with_retry(model, messages, max_tokens, temperature, seed)
        if not result.success:
            raise InferenceError(result.error or "Unknown inference error")
        if result.content is None:
            raise InferenceError(f"{self.name}: response contained no message content")
        return result.content


def get_inference_provider(
    config: dict,
    provider_override: Optional[str] = None,
    endpoint_override: Optional[str] = None,
) -> BaseProvider:
    """Factory function to create the configured inference provider."""
    ai_config = config.get("ai", {})
    provider_name = provider_override or ai_config.get("provider", "huggingface")

    provider_config = dict(ai_config.get(provider_name, {}))
    if endpoint_override:
        provider_config["endpoint"] = endpoint_override

    # Common config is the ai section minus provider sub-tables
    common_config = {
        k: v
        for k, v in ai_config.items()
        if k not in ("huggingface", "openai", "ollama")
    }

    if provider_name == "huggingface":
        from .huggingface import HuggingFaceProvider
        return HuggingFaceProvider(provider_config, common_config)
    elif provider_name == "openai":
        from .openai_provider import OpenAIProvider
        return OpenAIProvider(provider_config, common_config)
    elif provider_name == "ollama":
        from .ollama import OllamaProvider
        return OllamaProvider(provider_config, common_config)
    else:
        raise ValueError(f"Unknown inference provider: {provider_name}")
