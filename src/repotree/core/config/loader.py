"""
Configuration loading and saving.

The run configuration is written by `repotree init` and read at the start
of every other command. Environment variables override stored values:

    stored config < REPOTREE_* env vars
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from pydantic import ValidationError

from repotree.core.errors import ConfigError, ConfigNotFoundError
from repotree.core.workspace import Workspace

from .models import RepoTreeConfig

logger = logging.getLogger(__name__)


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        REPOTREE_JOBS - overrides sync.jobs
        REPOTREE_MANIFEST_BRANCH - overrides manifest.branch

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = {k: (dict(v) if isinstance(v, dict) else v) for k, v in config_dict.items()}

    if jobs_str := os.environ.get("REPOTREE_JOBS"):
        try:
            jobs = int(jobs_str)
            if jobs < 0:
                logger.warning("REPOTREE_JOBS must be >= 0, got %d, ignoring", jobs)
            else:
                result.setdefault("sync", {})["jobs"] = jobs
        except ValueError:
            logger.warning("Invalid REPOTREE_JOBS value '%s', ignoring", jobs_str)

    if branch := os.environ.get("REPOTREE_MANIFEST_BRANCH"):
        result.setdefault("manifest", {})["branch"] = branch

    return result


def load_config(workspace: Workspace) -> RepoTreeConfig:
    """
    Load the run configuration of a workspace.

    Args:
        workspace: Workspace whose `.repotree/config.json` is read

    Returns:
        Validated RepoTreeConfig instance

    Raises:
        ConfigNotFoundError: If the config file does not exist
        ConfigError: If the file is not valid JSON or fails validation
    """
    path = workspace.config_file
    if not path.exists():
        raise ConfigNotFoundError(f"Config file not found: {path}", path=path)

    try:
        with path.open() as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Fail to read config {path}: {e}", path=path) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object", path=path)

    try:
        return RepoTreeConfig(**apply_env_overrides(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}", path=path) from e


def save_config(workspace: Workspace, config: RepoTreeConfig) -> None:
    """Save the run configuration atomically."""
    path = workspace.config_file
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = path.with_suffix(".tmp")
    try:
        temp_path.write_text(config.model_dump_json(indent=2, exclude_none=True))
        temp_path.replace(path)
    except OSError:
        if temp_path.exists():
            temp_path.unlink()
        raise
