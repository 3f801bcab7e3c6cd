"""Shared fixtures for Swarm Review tests."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Callable, Optional, Union

import pytest

from swarmreview.models.agent import AgentVerdict, Vote
from swarmreview.models.provider import ChatMessage
from swarmreview.providers.base import InferenceError

Reply = Union[str, Callable[[Optional[int], str], str]]

DEFAULT_REPLIES: dict[str, str] = {
    "generate": "ISSUES: None\nQUALITY: 8\nNOTES: Looks fine.",
    "correct": "CORRECTIONS: None needed\nFINAL_ISSUES: None\nFINAL_QUALITY: 8",
    "vote": "VOTE: ACCEPT\nCONFIDENCE: 80%\nREASON: Meets the task.",
    "quick": "YES - it adds two numbers.",
}


def phase_of(prompt: str) -> str:
    if "Cast your FINAL VOTE" in prompt:
        return "vote"
    if "CORRECT your assessment" in prompt:
        return "correct"
    if "Does this output correctly complete the task?" in prompt:
        return "quick"
    return "generate"


class ScriptedProvider:
    """In-memory stand-in for an inference backend.

    Replies are looked up by phase; a reply may be a callable taking
    (agent_id, model). Agents listed in ``fail_agents`` raise on their
    first call.
    """

    name = "scripted"

    def __init__(
        self,
        replies: Optional[dict[str, Reply]] = None,
        fail_agents: Optional[set[int]] = None,
        delays: Optional[dict[int, float]] = None,
        error: Optional[Exception] = None,
    ):
        self.replies = {**DEFAULT_REPLIES, **(replies or {})}
        self.fail_agents = fail_agents or set()
        self.delays = delays or {}
        self.error = error or InferenceError("503 | backend unavailable")
        self.calls: list[dict] = []

    async def chat(
        self,
        model: str,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
        seed: Optional[int] = None,
    ) -> str:
        prompt = messages[-1].content
        m = re.search(r"Agent #(\d+)", prompt)
        agent_id = int(m.group(1)) if m else None
        phase = phase_of(prompt)
        self.calls.append({
            "agent_id": agent_id,
            "phase": phase,
            "model": model,
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "seed": seed,
        })

        if agent_id in self.delays:
            await asyncio.sleep(self.delays[agent_id])
        if agent_id in self.fail_agents:
            raise self.error

        reply = self.replies[phase]
        if callable(reply):
            return reply(agent_id, model)
        return reply

    def calls_for(self, agent_id: int) -> list[dict]:
        return [c for c in self.calls if c["agent_id"] == agent_id]


@pytest.fixture
def scripted_provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def make_verdict() -> Callable[..., AgentVerdict]:
    def _make(agent_id: int = 0, vote: str = "ACCEPT", confidence: int = 80,
              issues: Optional[list[str]] = None, model: str = "model-a") -> AgentVerdict:
        return AgentVerdict(
            agent_id=agent_id,
            model=model,
            vote=Vote(vote),
            confidence=confidence,
            issues=issues or [],
            reason="test",
        )
    return _make


@pytest.fixture
def code_file(tmp_path: Path) -> Path:
    path = tmp_path / "add.js"
    path.write_text("function add(a,b){return a+b}\n", encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / ".swarm-review.yaml"
    path.write_text(
        "swarm:\n"
        "  size: 2\n"
        "  models:\n"
        "    - acme/model-a\n"
        "    - acme/model-b\n"
        "ai:\n"
        "  provider: ollama\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def provider_factory() -> type[ScriptedProvider]:
    return ScriptedProvider
