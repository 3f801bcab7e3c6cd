"""Ollama local inference provider."""

from __future__ import annotations

from typing import Optional

import httpx

from ..models.provider import ChatMessage, CompletionResult
from .base import BaseProvider


class OllamaProvider(BaseProvider):
    name = "ollama"

    transport: Optional[httpx.AsyncBaseTransport] = None

    async def complete(
        self,
        model: str,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
        seed: Optional[int] = None,
    ) -> CompletionResult:
        endpoint = self.config.get("endpoint", "http://localhost:11434")

        options: dict = {"temperature": temperature, "num_predict": max_tokens}
        if seed is not None:
            options["seed"] = seed

        body = {
            "model": model,
            "messages": [m.model_dump() for m in messages],
            "stream": False,
            "options": options,
        }

        try:
            url = f"{endpoint.rstrip('/')}/api/chat"
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=body)
                response.raise_for_status()
                data = response.json()

            return CompletionResult(
                success=True,
                content=data["message"]["content"],
                tokens_used={
                    "input": data.get("prompt_eval_count", 0),
                    "output": data.get("eval_count", 0),
                },
            )
        except httpx.HTTPStatusError as e:
            return CompletionResult(
                success=False,
                error=f"{e.response.status_code} | {e.response.text}",
            )
        except Exception as e:
            return CompletionResult(success=False, error=str(e) or type(e).__name__)
