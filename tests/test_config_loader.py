"""
Unit tests for configuration loader.

Tests multi-layer config merging, environment variable overrides,
caching, and XDG directory handling.
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from tasktree.core.config import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    load_config,
)
from tasktree.core.config.loader import (
    apply_env_overrides,
    deep_merge,
    get_xdg_config_home,
    load_json_file,
)
from tasktree.core.config.models import MetadataConfig, TaskTreeConfig


def write_json(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# ==============================================================================
# Helper Functions Tests
# ==============================================================================


class TestDeepMerge:
    """Test the deep_merge helper function."""

    def test_nested_merge(self):
        """Test merging nested dicts."""
        base = {"a": 1, "b": {"x": 10, "y": 20}}
        override = {"b": {"y": 30, "z": 40}, "c": 3}
        assert deep_merge(base, override) == {"a": 1, "b": {"x": 10, "y": 30, "z": 40}, "c": 3}

    def test_override_replaces_non_dict(self):
        """Test that non-dict values are replaced, not merged."""
        assert deep_merge({"a": [1, 2, 3]}, {"a": [4, 5]}) == {"a": [4, 5]}

    def test_base_not_mutated(self):
        """Test that the base dict is left unchanged."""
        base = {"metadata": {"aliases": {"status": {"x": "done"}}}}
        deep_merge(base, {"metadata": {"aliases": {"status": {"y": "todo"}}}})
        assert base == {"metadata": {"aliases": {"status": {"x": "done"}}}}


class TestPaths:
    """Test config path helpers."""

    def test_xdg_config_home(self, tmp_path, monkeypatch):
        """Test that XDG_CONFIG_HOME is honored."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_xdg_config_home() == tmp_path
        assert get_user_config_path() == tmp_path / "tasktree" / "config.json"

    def test_xdg_default(self, monkeypatch):
        """Test the ~/.config fallback."""
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        assert get_xdg_config_home() == Path.home() / ".config"

    def test_empty_xdg_is_unset(self, monkeypatch):
        """Test that an empty XDG_CONFIG_HOME falls back to ~/.config."""
        monkeypatch.setenv("XDG_CONFIG_HOME", "")
        assert get_xdg_config_home() == Path.home() / ".config"

    def test_project_config_path(self, tmp_path):
        """Test the project config location."""
        assert get_project_config_path(tmp_path) == tmp_path / ".tasktree.json"


class TestLoadJsonFile:
    """Test resilient JSON loading."""

    def test_missing(self, tmp_path):
        """Test that a missing file yields None."""
        assert load_json_file(tmp_path / "nope.json") is None

    def test_invalid_json(self, tmp_path):
        """Test that malformed JSON yields None."""
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_json_file(path) is None

    def test_non_object(self, tmp_path):
        """Test that a non-object top level is ignored."""
        assert load_json_file(write_json(tmp_path / "list.json", [1, 2])) is None

    def test_undecodable_file_skipped(self, tmp_path, caplog):
        """Test that a file that is not UTF-8 is skipped with a warning."""
        path = tmp_path / "latin1.json"
        path.write_bytes(b"\xff\xfe{}")

        with caplog.at_level("WARNING", logger="tasktree.core.config.loader"):
            assert load_json_file(path) is None
        assert "Skipping config" in caplog.text


# ==============================================================================
# Environment overrides
# ==============================================================================


class TestEnvOverrides:
    """Test environment variable overrides."""

    def test_sentinel_step(self, monkeypatch):
        """Test TASKTREE_SENTINEL_STEP."""
        monkeypatch.setenv("TASKTREE_SENTINEL_STEP", " zz ")
        assert apply_env_overrides({}) == {"sequence": {"sentinel_step": "zz"}}

    def test_empty_sentinel_ignored(self, monkeypatch):
        """Test that an empty sentinel is ignored."""
        monkeypatch.setenv("TASKTREE_SENTINEL_STEP", "  ")
        assert apply_env_overrides({}) == {}

    def test_default_priority_normalized(self, monkeypatch):
        """Test that legacy spellings are accepted for the default priority."""
        monkeypatch.setenv("TASKTREE_DEFAULT_PRIORITY", "🔼 High")
        result = apply_env_overrides({"metadata": {"default_status": "done"}})
        assert result["metadata"] == {"default_status": "done", "default_priority": "high"}

    def test_invalid_default_priority_ignored(self, monkeypatch):
        """Test that unknown priorities are ignored."""
        monkeypatch.setenv("TASKTREE_DEFAULT_PRIORITY", "whenever")
        assert apply_env_overrides({}) == {}


# ==============================================================================
# load_config
# ==============================================================================


class TestLoadConfig:
    """Test layered configuration loading."""

    def test_defaults(self, tmp_path):
        """Test that no config files yields defaults."""
        config = load_config(project_dir=tmp_path, use_cache=False)
        assert config.sequence.sentinel_step == "99"
        assert config.metadata.aliases == {}

    def test_precedence(self, tmp_path, monkeypatch):
        """Test defaults < user < project < env."""
        write_json(
            get_user_config_path(),
            {
                "sequence": {"sentinel_step": "zz"},
                "metadata": {"aliases": {"status": {"shipped": "done"}}},
            },
        )
        write_json(
            tmp_path / ".tasktree.json",
            {
                "sequence": {"sentinel_step": "yy"},
                "metadata": {"aliases": {"status": {"parked": "blocked"}}},
            },
        )
        monkeypatch.setenv("TASKTREE_DEFAULT_PRIORITY", "low")

        config = load_config(project_dir=tmp_path, use_cache=False)

        assert config.sequence.sentinel_step == "yy"
        assert config.metadata.aliases == {"status": {"shipped": "done", "parked": "blocked"}}
        assert config.metadata.default_priority == "low"

    def test_cache(self, tmp_path):
        """Test that the cached config is reused until cleared."""
        first = load_config(project_dir=tmp_path)
        write_json(tmp_path / ".tasktree.json", {"sequence": {"sentinel_step": "yy"}})

        assert load_config(project_dir=tmp_path) is first
        clear_cache()
        assert load_config(project_dir=tmp_path).sequence.sentinel_step == "yy"

    def test_invalid_alias_field(self, tmp_path):
        """Test that alias tables for unknown fields fail validation."""
        write_json(tmp_path / ".tasktree.json", {"metadata": {"aliases": {"color": {}}}})
        with pytest.raises(ValidationError):
            load_config(project_dir=tmp_path, use_cache=False)


class TestConfigModels:
    """Test configuration models."""

    def test_metadata_defaults_omit_unset(self):
        """Test that only configured defaults are returned."""
        config = MetadataConfig(default_status="blocked")
        assert config.defaults() == {"status": "blocked"}

    def test_empty_sentinel_rejected(self):
        """Test that the sentinel step cannot be empty."""
        with pytest.raises(ValidationError):
            TaskTreeConfig(sequence={"sentinel_step": ""})

    def test_extra_fields_allowed(self):
        """Test forward compatibility with unknown keys."""
        config = TaskTreeConfig(theme="dark")
        assert config.model_extra == {"theme": "dark"}
