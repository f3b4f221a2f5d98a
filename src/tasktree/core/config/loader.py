"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from tasktree.core.metadata.normalizer import get_default_normalizer
from tasktree.core.metadata.schema import PRIORITY

from .models import TaskTreeConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = ".tasktree.json"

# Global cache to avoid reloading config multiple times per process
_config_cache: TaskTreeConfig | None = None


def get_xdg_config_home() -> Path:
    """$XDG_CONFIG_HOME, or ~/.config when unset or empty."""
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """Per-user config file shared by every project."""
    return get_xdg_config_home() / "tasktree" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """The .tasktree.json file of the project rooted at *cwd* (default: cwd)."""
    return (cwd or Path.cwd()) / PROJECT_CONFIG_NAME


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Layer *override* on top of *base* without mutating either.

    Mappings merge key by key, so alias tables from the user and project
    files combine; any other value in *override* replaces the base value.

    Example:
        >>> deep_merge(
        ...     {"metadata": {"aliases": {"status": {"wip": "in_progress"}}}},
        ...     {"metadata": {"aliases": {"status": {"parked": "blocked"}}}},
        ... )["metadata"]["aliases"]["status"]
        {'wip': 'in_progress', 'parked': 'blocked'}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Read one config layer.

    A missing file is an absent layer. A file that cannot be decoded into a
    JSON object is skipped with a warning.
    """
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"Skipping config at {path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Skipping config at {path}: top level is not an object")
        return None
    return data


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        TASKTREE_SENTINEL_STEP - overrides sequence.sentinel_step
        TASKTREE_DEFAULT_PRIORITY - overrides metadata.default_priority

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if "TASKTREE_SENTINEL_STEP" in os.environ:
        sentinel = os.environ["TASKTREE_SENTINEL_STEP"].strip()
        if not sentinel:
            logger.warning("Empty TASKTREE_SENTINEL_STEP value, ignoring")
        else:
            result["sequence"] = {**result.get("sequence", {}), "sentinel_step": sentinel}

    if priority := os.environ.get("TASKTREE_DEFAULT_PRIORITY"):
        canonical = get_default_normalizer().lookup(PRIORITY, priority)
        if canonical is None:
            logger.warning(f"Invalid TASKTREE_DEFAULT_PRIORITY value '{priority}', ignoring")
        else:
            result["metadata"] = {**result.get("metadata", {}), "default_priority": canonical}

    return result


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> TaskTreeConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (TASKTREE_*)
        2. Project config (.tasktree.json)
        3. User config (~/.config/tasktree/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .tasktree.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated TaskTreeConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged: dict[str, Any] = {}

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    # Project config has higher priority than user config
    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = TaskTreeConfig(**merged)

    _config_cache = config

    return config


def clear_cache() -> None:
    """Forget the cached config so the next load_config() rereads every layer."""
    global _config_cache
    _config_cache = None
