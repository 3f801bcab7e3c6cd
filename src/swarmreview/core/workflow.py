"""Single agent workflow: Generate -> Correct -> Vote.

Each phase is one backend call whose prompt embeds the previous phase's
text. Any failure along the way turns into a low-confidence ACCEPT for
this agent only; run_agent_workflow never raises.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..models.agent import AgentConfig, AgentVerdict, Vote
from ..models.provider import ChatMessage
from ..providers.base import InferenceProvider
from ..utils.sanitize import sanitize_error
from .extraction import extract_confidence, extract_issues, extract_reason, extract_vote
from .prompts import (
    PHASE_SETTINGS,
    SEED_BASE,
    build_correct_prompt,
    build_generate_prompt,
    build_vote_prompt,
)

console = Console(stderr=True)

FALLBACK_CONFIDENCE = 30


async def run_phase(
    provider: InferenceProvider,
    model: str,
    phase: str,
    prompt: str,
    timeout: Optional[float] = None,
    seed: Optional[int] = None,
) -> str:
    """Send one phase prompt and return the raw response text."""
    settings = PHASE_SETTINGS[phase]
    call = provider.chat(
        model=model,
        messages=[ChatMessage(role="user", content=prompt)],
        max_tokens=settings["max_tokens"],
        temperature=settings["temperature"],
        seed=seed,
    )
    if timeout:
        return await asyncio.wait_for(call, timeout=timeout)
    return await call


def fallback_verdict(agent: AgentConfig, error: BaseException) -> AgentVerdict:
    """Verdict for an agent that never got to evaluate."""
    message = sanitize_error(str(error)) or type(error).__name__
    return AgentVerdict(
        agent_id=agent.agent_index,
        model=agent.short_model,
        vote=Vote.ACCEPT,
        confidence=FALLBACK_CONFIDENCE,
        issues=(),
        reason=f"API error: {message[:50]}",
    )


async def run_agent_workflow(
    agent: AgentConfig,
    provider: InferenceProvider,
    task: str,
    code: str,
    language: Optional[str] = None,
    phase_timeout: Optional[float] = None,
) -> AgentVerdict:
    agent_id = agent.agent_index
    console.print(f"  [dim]Agent #{agent_id}: Starting workflow with {escape(agent.short_model)}...[/dim]")

    try:
        initial = await run_phase(
            provider,
            agent.model,
            "generate",
            build_generate_prompt(agent_id, task, code, language),
            timeout=phase_timeout,
            seed=SEED_BASE + agent_id,
        )
        console.print(f"  [dim]Agent #{agent_id}: Phase 1 (Generate) complete[/dim]")

        corrected = await run_phase(
            provider,
            agent.model,
            "correct",
            build_correct_prompt(agent_id, initial),
            timeout=phase_timeout,
        )
        console.print(f"  [dim]Agent #{agent_id}: Phase 2 (Correct) complete[/dim]")

        ballot = await run_phase(
            provider,
            agent.model,
            "vote",
            build_vote_prompt(agent_id, corrected, task),
            timeout=phase_timeout,
        )
    except Exception as e:
        verdict = fallback_verdict(agent, e)
        console.print(f"  [red]FAILED[/red] Agent #{agent_id}: {escape(verdict.reason)}")
        return verdict

    verdict = AgentVerdict(
        agent_id=agent_id,
        model=agent.short_model,
        vote=extract_vote(ballot),
        confidence=extract_confidence(ballot),
        issues=extract_issues(corrected),
        reason=extract_reason(ballot),
    )
    console.print(
        f"  [green]OK[/green] Agent #{agent_id} Phase 3 (Vote): "
        f"{verdict.vote.value} ({verdict.confidence}%)"
    )
    return verdict
