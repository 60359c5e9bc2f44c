"""Environment loading helpers.

Git credentials helpers, proxies and REPOTREE_* overrides can be kept in
.env files:
- OS environment (highest precedence)
- Workspace environment file (.repotree/.env)
- User environment file (~/.config/repotree/.env)

A .env value never overrides a variable that is already present in the
process environment.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values


def _read_env(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values = dotenv_values(path)
    out: dict[str, str] = {}
    for k, v in values.items():
        if k is None or v is None:
            continue
        out[str(k)] = str(v)
    return out


def get_user_env_path() -> Path:
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return xdg_home / "repotree" / ".env"


def load_layered_env(
    *,
    user_env_paths: Iterable[Path] | None = None,
    workspace_env_paths: Iterable[Path] | None = None,
) -> None:
    """Load environment variables from user + workspace .env files.

    Args:
        user_env_paths: explicit user env file paths
        workspace_env_paths: workspace env file paths (none by default)

    Notes:
        We track which keys came from user env so that workspace env can
        override those keys while still never overriding pre-existing OS
        environment.
    """
    if user_env_paths is None:
        user_env_paths = [get_user_env_path()]

    user_set_keys: set[str] = set()
    for p in user_env_paths:
        for k, v in _read_env(Path(p)).items():
            if k not in os.environ:
                os.environ[k] = v
                user_set_keys.add(k)

    for p in workspace_env_paths or ():
        for k, v in _read_env(Path(p)).items():
            if k not in os.environ or k in user_set_keys:
                os.environ[k] = v
