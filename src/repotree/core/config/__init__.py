"""
Configuration models and loading.

This module provides Pydantic models for the persisted run configuration
(`.repotree/config.json`) with env var overrides.
"""

from .loader import apply_env_overrides, load_config, save_config
from .models import ManifestSettings, RepoTreeConfig, SyncSettings

__all__ = [
    # Models
    "ManifestSettings",
    "RepoTreeConfig",
    "SyncSettings",
    # Loader functions
    "apply_env_overrides",
    "load_config",
    "save_config",
]
