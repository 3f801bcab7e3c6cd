"""Swarm Review (swarm-review) - multi-agent consensus code review CLI."""

from __future__ import annotations

import asyncio
import json
import sys
import time
from pathlib import Path

import click
from pydantic import ValidationError

EXIT_APPROVED = 0
EXIT_REJECTED = 1
EXIT_INVALID_INPUT = 11
EXIT_PROVIDER_ERROR = 13


def _build_config(
    config_path: str | None,
    swarm_size: int | None,
    models: tuple[str, ...],
    ai_provider: str | None,
    timeout: float | None,
) -> dict:
    from ..core.config import get_effective_config

    overrides: dict = {}
    swarm: dict = {}
    if swarm_size is not None:
        swarm["size"] = swarm_size
    if models:
        swarm["models"] = list(models)
    if timeout is not None:
        swarm["phase_timeout_seconds"] = timeout
    if swarm:
        overrides["swarm"] = swarm
    if ai_provider:
        overrides["ai"] = {"provider": ai_provider}

    return get_effective_config(
        config_path=Path(config_path) if config_path else None,
        cli_overrides=overrides or None,
    )


def _make_provider(ctx: click.Context, config: dict, ai_provider: str | None, ai_endpoint: str | None):
    from ..providers.base import get_inference_provider

    try:
        return get_inference_provider(
            config,
            provider_override=ai_provider,
            endpoint_override=ai_endpoint,
        )
    except ValueError as e:
        click.echo(f"Error: failed to initialize inference provider: {e}", err=True)
        ctx.exit(EXIT_PROVIDER_ERROR)


def _read_code(ctx: click.Context, code_file) -> str:
    try:
        return code_file.read()
    except UnicodeDecodeError as e:
        click.echo(f"Error: code input is not valid UTF-8 ({e.reason} at byte {e.start})", err=True)
        ctx.exit(EXIT_INVALID_INPUT)


def _validation_message(error: ValidationError) -> str:
    fields = ", ".join(str(e["loc"][0]) for e in error.errors() if e.get("loc"))
    return f"Missing required fields: {fields}" if fields else str(error)


@click.group()
def swarm_cli() -> None:
    """Swarm Review - independent LLM agents vote on a piece of code."""


@swarm_cli.command()
@click.pass_context
@click.option("--code", "-c", "code_file", type=click.File("r", encoding="utf-8"), required=True,
              help="File with the code to review ('-' for stdin)")
@click.option("--task", "-t", type=str, required=True, help="What the code is supposed to do")
@click.option("--language", "-l", type=str, help="Language hint, e.g. python")
@click.option("--swarm-size", "-n", type=click.IntRange(min=1), help="Number of agents")
@click.option("--model", "-m", "models", multiple=True, help="Model id (repeatable, replaces the registry)")
@click.option("--ai-provider", type=click.Choice(["huggingface", "openai", "ollama"]))
@click.option("--ai-endpoint", type=str, help="Endpoint override")
@click.option("--timeout", type=float, help="Per-phase timeout in seconds (0 disables)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML config file")
@click.option("--output-format", "-f", type=click.Choice(["json", "markdown"]), default="json")
@click.option("--ci", is_flag=True, help="CI mode: exit 1 when the swarm rejects")
def review(
    ctx: click.Context,
    code_file,
    task: str,
    language: str | None,
    swarm_size: int | None,
    models: tuple[str, ...],
    ai_provider: str | None,
    ai_endpoint: str | None,
    timeout: float | None,
    config_path: str | None,
    output_format: str,
    ci: bool,
) -> None:
    """Run the Generate -> Correct -> Vote swarm and print the consensus."""
    from ..core.consensus import generate_consensus_report
    from ..core.orchestrator import run_review
    from ..models.review import Verdict

    code = _read_code(ctx, code_file)
    config = _build_config(config_path, swarm_size, models, ai_provider, timeout)
    provider = _make_provider(ctx, config, ai_provider, ai_endpoint)

    start = time.time()
    try:
        result = asyncio.run(run_review(code, task, language=language, config=config, provider=provider))
    except ValidationError as e:
        click.echo(f"Error: {_validation_message(e)}", err=True)
        ctx.exit(EXIT_INVALID_INPUT)
        return
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_INVALID_INPUT)
        return

    if output_format == "markdown":
        click.echo(
            generate_consensus_report(
                result,
                task=task,
                duration_seconds=time.time() - start,
                provider=provider.name,
            )
        )
    else:
        click.echo(json.dumps(result.to_response(), indent=2))

    if ci:
        sys.exit(EXIT_APPROVED if result.verdict == Verdict.APPROVED else EXIT_REJECTED)


@swarm_cli.command()
@click.pass_context
@click.option("--code", "-c", "code_file", type=click.File("r", encoding="utf-8"), required=True,
              help="File with the code to review ('-' for stdin)")
@click.option("--task", "-t", type=str, required=True, help="What the code is supposed to do")
@click.option("--model", "-m", "models", multiple=True, help="Model id (first one is used)")
@click.option("--ai-provider", type=click.Choice(["huggingface", "openai", "ollama"]))
@click.option("--ai-endpoint", type=str, help="Endpoint override")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML config file")
@click.option("--ci", is_flag=True, help="CI mode: exit 1 on NO")
def quick(
    ctx: click.Context,
    code_file,
    task: str,
    models: tuple[str, ...],
    ai_provider: str | None,
    ai_endpoint: str | None,
    config_path: str | None,
    ci: bool,
) -> None:
    """Single-agent YES/NO review without self-correction."""
    from ..core.orchestrator import run_quick_review

    code = _read_code(ctx, code_file)
    config = _build_config(config_path, None, models, ai_provider, None)
    provider = _make_provider(ctx, config, ai_provider, ai_endpoint)

    try:
        result = asyncio.run(run_quick_review(code, task, config=config, provider=provider))
    except ValidationError as e:
        click.echo(f"Error: {_validation_message(e)}", err=True)
        ctx.exit(EXIT_INVALID_INPUT)
        return
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_INVALID_INPUT)
        return

    click.echo(json.dumps(result.model_dump(), indent=2))
    if ci:
        sys.exit(EXIT_APPROVED if result.approved else EXIT_REJECTED)


def main() -> None:
    swarm_cli()


if __name__ == "__main__":
    main()
