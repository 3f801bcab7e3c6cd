"""Hugging Face inference router provider (OpenAI-compatible)."""

from __future__ import annotations

from typing import Optional

from rich.console import Console

from ..models.provider import CompletionResult
from .openai_provider import OpenAIProvider

console = Console(stderr=True)


class HuggingFaceProvider(OpenAIProvider):
    name = "huggingface"
    DEFAULT_ENDPOINT = "https://router.huggingface.co/v1"
    DEFAULT_KEY_ENV = "HF_TOKEN"

    def __init__(self, provider_config: dict, common_config: dict):
        super().__init__(provider_config, common_config)
        if not self._get_api_key():
            env_var = self.config.get("api_key_env", self.DEFAULT_KEY_ENV)
            console.print(
                f"  [yellow]WARN[/yellow] No {env_var} found. Swarm review may fail."
            )

    def _missing_key_result(self) -> Optional[CompletionResult]:
        # The router answers 401, which surfaces as an adapter failure.
        return None
