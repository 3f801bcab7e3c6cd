"""Swarm review orchestrator.

Fans a review request out to N independent agent workflows, waits for
every one of them to settle, then hands the verdicts to the aggregator.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models.agent import AgentConfig, AgentVerdict, Vote
from ..models.provider import ChatMessage
from ..models.review import QuickReviewResult, ReviewRequest, ReviewResult, Verdict, format_percent
from ..providers.base import InferenceProvider, get_inference_provider
from ..utils.sanitize import sanitize_error
from .config import DEFAULT_CONFIG, get_swarm_settings
from .consensus import aggregate
from .prompts import PHASE_SETTINGS, build_quick_prompt
from .workflow import run_agent_workflow

console = Console(stderr=True)

MAX_CODE_CHARS = 3000
TRUNCATION_MARKER = "\n...[truncated]"
QUICK_CODE_CHARS = 1000


def truncate_code(code: str, limit: int = MAX_CODE_CHARS) -> str:
    """Cap the code embedded in prompts, marking the cut."""
    if len(code) <= limit:
        return code
    return code[:limit] + TRUNCATION_MARKER


def assign_agents(swarm_size: int, models: list[str]) -> list[AgentConfig]:
    """Give agent i the model at models[i mod len(models)]."""
    if swarm_size < 1:
        raise ValueError(f"Swarm size must be at least 1, got {swarm_size}")
    if not models:
        raise ValueError("At least one model is required")
    return [
        AgentConfig(agent_index=i, model=models[i % len(models)])
        for i in range(swarm_size)
    ]


async def run_swarm(
    request: ReviewRequest,
    provider: InferenceProvider,
    agents: list[AgentConfig],
    phase_timeout: Optional[float] = None,
) -> list[AgentVerdict]:
    """Run every agent concurrently and return verdicts by agent id."""
    code = truncate_code(request.code)
    verdicts = await asyncio.gather(
        *(
            run_agent_workflow(
                agent,
                provider,
                task=request.task,
                code=code,
                language=request.language,
                phase_timeout=phase_timeout,
            )
            for agent in agents
        )
    )
    return sorted(verdicts, key=lambda v: v.agent_id)


def print_consensus(result: ReviewResult) -> None:
    """Console table of the swarm's votes and the final decision."""
    table = Table(title="Swarm Consensus Report", title_justify="left")
    table.add_column("Agent")
    table.add_column("Model")
    table.add_column("Vote")
    table.add_column("Confidence", justify="right")
    table.add_column("Reason")

    for verdict in result.verdicts:
        color = "green" if verdict.vote == Vote.ACCEPT else "red"
        reason = verdict.reason if len(verdict.reason) <= 40 else verdict.reason[:40] + "..."
        table.add_row(
            f"#{verdict.agent_id}",
            escape(verdict.model),
            f"[{color}]{verdict.vote.value}[/{color}]",
            f"{verdict.confidence}%",
            escape(reason),
        )

    console.print()
    console.print(table)
    console.print(
        f"  Simple Vote: {result.approvals} ACCEPT vs {result.rejections} REJECT"
    )
    score = format_percent(result.score, places=1)
    threshold = format_percent(result.threshold)
    console.print(f"  Weighted Score: {score} approval (threshold {threshold})")

    if result.verdict == Verdict.APPROVED:
        console.print(f"  [green]CONSENSUS: APPROVED[/green] ({score} >= {threshold})")
    else:
        console.print(f"  [red]CONSENSUS: REJECTED[/red] ({score} < {threshold})")


async def run_swarm_review(
    request: ReviewRequest,
    provider: InferenceProvider,
    swarm_size: int = DEFAULT_CONFIG["swarm"]["size"],
    models: Optional[list[str]] = None,
    phase_timeout: Optional[float] = None,
) -> ReviewResult:
    """Review one request with a swarm of agents."""
    if phase_timeout is not None and phase_timeout < 0:
        raise ValueError(f"Phase timeout must be >= 0, got {phase_timeout}")
    agents = assign_agents(swarm_size, models or DEFAULT_CONFIG["swarm"]["models"])

    console.print()
    console.print(f"  [bold cyan]SWARM REVIEW[/bold cyan] ({len(agents)} agents)")
    console.print(
        "  Protocol: "
        f"Generate(T={PHASE_SETTINGS['generate']['temperature']}) -> "
        f"Correct(T={PHASE_SETTINGS['correct']['temperature']}) -> "
        f"Vote(T={PHASE_SETTINGS['vote']['temperature']})"
    )

    verdicts = await run_swarm(request, provider, agents, phase_timeout=phase_timeout)
    result = aggregate(verdicts)
    print_consensus(result)
    return result


async def run_review(
    code: Optional[str],
    task: Optional[str],
    language: Optional[str] = None,
    config: Optional[dict] = None,
    provider: Optional[InferenceProvider] = None,
) -> ReviewResult:
    """Validate raw input, resolve configuration and run the swarm.

    Raises pydantic.ValidationError for missing code/task and ValueError
    for an unusable swarm configuration, both before any backend call.
    """
    request = ReviewRequest(code=code or "", task=task or "", language=language)
    config = config or DEFAULT_CONFIG
    swarm_size, models, phase_timeout = get_swarm_settings(config)

    if provider is None:
        provider = get_inference_provider(config)

    return await run_swarm_review(
        request,
        provider,
        swarm_size=swarm_size,
        models=models,
        phase_timeout=phase_timeout,
    )


async def run_quick_review(
    code: Optional[str],
    task: Optional[str],
    config: Optional[dict] = None,
    provider: Optional[InferenceProvider] = None,
) -> QuickReviewResult:
    """Single-call YES/NO check on the first registry model. Fails open."""
    request = ReviewRequest(code=code or "", task=task or "")
    config = config or DEFAULT_CONFIG
    _, models, phase_timeout = get_swarm_settings(config)

    if provider is None:
        provider = get_inference_provider(config)

    settings = PHASE_SETTINGS["quick"]
    prompt = build_quick_prompt(request.task, request.code[:QUICK_CODE_CHARS])
    console.print("  [cyan]Quick review (single agent)...[/cyan]")

    try:
        call = provider.chat(
            model=models[0],
            messages=[ChatMessage(role="user", content=prompt)],
            max_tokens=settings["max_tokens"],
            temperature=settings["temperature"],
        )
        content = await (asyncio.wait_for(call, timeout=phase_timeout) if phase_timeout else call)
    except Exception as e:
        reason = f"API error: {(sanitize_error(str(e)) or type(e).__name__)[:50]}"
        console.print(f"  [yellow]WARN[/yellow] Quick review failed open: {escape(reason)}")
        return QuickReviewResult(approved=True, reason=reason)

    content = content or "YES"
    approved = "YES" in content.upper()
    console.print(f"  Quick: {'YES' if approved else 'NO'} - {escape(content[:50])}")
    return QuickReviewResult(approved=approved, reason=content.strip())
