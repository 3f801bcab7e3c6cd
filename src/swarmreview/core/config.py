"""3-layer configuration system for Swarm Review.

Loads and merges configuration from:
1. Default settings (built-in)
2. Project config (.swarm-review.yaml, or an explicit file)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Optional

import yaml

CONFIG_FILENAME = ".swarm-review.yaml"

DEFAULT_CONFIG: dict = {
    "swarm": {
        "size": 4,
        "models": [
            "Qwen/Qwen2.5-Coder-32B-Instruct",
            "meta-llama/Meta-Llama-3-8B-Instruct",
        ],
        "phase_timeout_seconds": 60,
    },
    "ai": {
        "provider": "huggingface",
        "timeout_seconds": 120,
        "retry_attempts": 1,
        "retry_delay_seconds": 5,
        "huggingface": {
            "endpoint": "https://router.huggingface.co/v1",
            "api_key_env": "HF_TOKEN",
        },
        "openai": {
            "endpoint": "https://api.openai.com/v1",
            "api_key_env": "OPENAI_API_KEY",
        },
        "ollama": {
            "endpoint": "http://localhost:11434",
        },
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Arrays are replaced, not merged."""
    result = dict(base)
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def load_config_file(config_path: Path) -> dict:
    """Load a YAML config file; missing or unreadable files yield {}."""
    if not config_path.is_file():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        loaded = yaml.safe_load(content)
    except (OSError, yaml.YAMLError):
        return {}
    return loaded if isinstance(loaded, dict) else {}


def get_effective_config(
    project_path: Optional[Path] = None,
    config_path: Optional[Path] = None,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration for a review."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is None:
        config_path = Path(project_path or Path.cwd()) / CONFIG_FILENAME
    file_config = load_config_file(Path(config_path))
    if file_config:
        config = deep_merge(config, file_config)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    return config


def get_swarm_settings(config: dict) -> tuple[int, list[str], Optional[float]]:
    """Return (swarm size, model registry, phase timeout) from a config.

    Raises ValueError when the swarm cannot be assembled.
    """
    swarm = config.get("swarm") or {}
    models = [m for m in (swarm.get("models") or []) if m]

    try:
        size = int(swarm.get("size", 4))
    except (TypeError, ValueError):
        raise ValueError(f"swarm.size must be an integer, got {swarm.get('size')!r}") from None

    timeout = swarm.get("phase_timeout_seconds")
    try:
        timeout = float(timeout) if timeout is not None else 0.0
    except (TypeError, ValueError):
        raise ValueError(
            f"swarm.phase_timeout_seconds must be a number, got {timeout!r}"
        ) from None

    if size < 1:
        raise ValueError(f"swarm.size must be at least 1, got {size}")
    if not models:
        raise ValueError("swarm.models must list at least one model")
    if timeout < 0:
        raise ValueError(f"swarm.phase_timeout_seconds must be >= 0, got {timeout:g}")

    return size, models, timeout or None
