"""OpenAI chat-completions provider.

Also the base for any backend that speaks the same wire format.
"""

from __future__ import annotations

import os
from typing import Optional

import httpx

from ..models.provider import ChatMessage, CompletionResult
from .base import BaseProvider


class OpenAIProvider(BaseProvider):
    name = "openai"
    DEFAULT_ENDPOINT = "https://api.openai.com/v1"
    DEFAULT_KEY_ENV = "OPENAI_API_KEY"

    # Tests swap in an httpx.MockTransport here.
    transport: Optional[httpx.AsyncBaseTransport] = None

    def _get_api_key(self) -> Optional[str]:
        env_var = self.config.get("api_key_env", self.DEFAULT_KEY_ENV)
        return os.environ.get(env_var)

    def _missing_key_result(self) -> Optional[CompletionResult]:
        env_var = self.config.get("api_key_env", self.DEFAULT_KEY_ENV)
        return CompletionResult(
            success=False,
            error=f"API key not found in environment variable: {env_var}",
        )

    @property
    def url(self) -> str:
        endpoint = self.config.get("endpoint") or self.DEFAULT_ENDPOINT
        return f"{endpoint.rstrip('/')}/chat/completions"

    async def complete(
        self,
        model: str,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
        seed: Optional[int] = None,
    ) -> CompletionResult:
        api_key = self._get_api_key()
        if not api_key:
            missing = self._missing_key_result()
            if missing is not None:
                return missing

        body: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [m.model_dump() for m in messages],
        }
        if seed is not None:
            body["seed"] = seed

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=body, headers=headers)
                response.raise_for_status()
                data = response.json()

            content = data["choices"][0]["message"]["content"]
            usage = data.get("usage") or {}
            tokens = {
                "input": usage.get("prompt_tokens", 0),
                "output": usage.get("completion_tokens", 0),
            }

            return CompletionResult(success=True, content=content, tokens_used=tokens)
        except httpx.HTTPStatusError as e:
            error_body = ""
            try:
                error_body = e.response.text
            except Exception:
                pass
            return CompletionResult(
                success=False,
                error=f"{e.response.status_code} | {error_body}",
            )
        except (KeyError, IndexError, TypeError) as e:
            return CompletionResult(success=False, error=f"Malformed response: {e!r}")
        except Exception as e:
            return CompletionResult(success=False, error=str(e) or type(e).__name__)
