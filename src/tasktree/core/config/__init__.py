"""
Configuration models and loading.

This module provides Pydantic models for tasktree configuration
with multi-layer merging: defaults < user < project < env vars.
"""

from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import MetadataConfig, SequenceConfig, TaskTreeConfig

__all__ = [
    # Models
    "MetadataConfig",
    "SequenceConfig",
    "TaskTreeConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
]
