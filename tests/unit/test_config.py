"""Tests for core/config.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from swarmreview.core.config import (
    CONFIG_FILENAME,
    deep_merge,
    get_effective_config,
    get_swarm_settings,
    load_config_file,
)


class TestDeepMerge:
    def test_simple_merge(self):
        assert deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4}) == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        base = {"ai": {"provider": "huggingface", "timeout_seconds": 30}}
        result = deep_merge(base, {"ai": {"provider": "openai"}})
        assert result["ai"] == {"provider": "openai", "timeout_seconds": 30}

    def test_arrays_replaced(self):
        base = {"swarm": {"models": ["a/x", "b/y"]}}
        result = deep_merge(base, {"swarm": {"models": ["c/z"]}})
        assert result["swarm"]["models"] == ["c/z"]

    def test_base_not_mutated(self):
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base["a"]["b"] == 1


class TestLoadConfigFile:
    def test_loads_yaml(self, config_file: Path):
        config = load_config_file(config_file)
        assert config["swarm"]["size"] == 2
        assert config["ai"]["provider"] == "ollama"

    def test_missing_file(self, tmp_path: Path):
        assert load_config_file(tmp_path / "nope.yaml") == {}

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == {}

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("swarm: [unclosed\n", encoding="utf-8")
        assert load_config_file(path) == {}

    def test_bom_tolerated(self, tmp_path: Path):
        path = tmp_path / "bom.yaml"
        path.write_text("\ufeffswarm:\n  size: 6\n", encoding="utf-8")
        assert load_config_file(path)["swarm"]["size"] == 6


class TestGetEffectiveConfig:
    def test_defaults_applied(self, tmp_path: Path):
        config = get_effective_config(project_path=tmp_path)
        assert config["swarm"]["size"] == 4
        assert config["ai"]["provider"] == "huggingface"

    def test_project_file_discovered(self, tmp_path: Path):
        (tmp_path / CONFIG_FILENAME).write_text("swarm:\n  size: 8\n", encoding="utf-8")
        config = get_effective_config(project_path=tmp_path)
        assert config["swarm"]["size"] == 8
        assert len(config["swarm"]["models"]) == 2

    def test_explicit_file(self, config_file: Path):
        config = get_effective_config(config_path=config_file)
        assert config["swarm"]["models"] == ["acme/model-a", "acme/model-b"]

    def test_cli_overrides_file(self, config_file: Path):
        config = get_effective_config(
            config_path=config_file,
            cli_overrides={"swarm": {"size": 5}, "ai": {"provider": "openai"}},
        )
        assert config["swarm"]["size"] == 5
        assert config["ai"]["provider"] == "openai"


class TestGetSwarmSettings:
    def test_defaults(self, tmp_path: Path):
        size, models, timeout = get_swarm_settings(get_effective_config(project_path=tmp_path))
        assert size == 4
        assert models[0] == "Qwen/Qwen2.5-Coder-32B-Instruct"
        assert timeout == 60.0

    def test_timeout_disabled(self):
        _, _, timeout = get_swarm_settings({"swarm": {"models": ["a/b"], "phase_timeout_seconds": 0}})
        assert timeout is None

    def test_empty_models(self):
        with pytest.raises(ValueError, match="models"):
            get_swarm_settings({"swarm": {"size": 2, "models": []}})

    def test_bad_size(self):
        with pytest.raises(ValueError, match="size"):
            get_swarm_settings({"swarm": {"size": 0, "models": ["a/b"]}})

    def test_negative_timeout(self):
        with pytest.raises(ValueError, match="phase_timeout_seconds"):
            get_swarm_settings({"swarm": {"models": ["a/b"], "phase_timeout_seconds": -1}})

    def test_non_numeric_timeout(self):
        with pytest.raises(ValueError, match="phase_timeout_seconds"):
            get_swarm_settings({"swarm": {"models": ["a/b"], "phase_timeout_seconds": "soon"}})

    def test_non_numeric_size(self):
        with pytest.raises(ValueError, match="size"):
            get_swarm_settings({"swarm": {"size": None, "models": ["a/b"]}})
