"""
Workspace root discovery.

A workspace is the directory that holds every project checkout plus the
`.repotree/` control directory (config file and manifest checkout). The
Workspace value is passed explicitly to every component that touches the
filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from repotree.core.errors import WorkspaceNotFoundError

if TYPE_CHECKING:
    from repotree.core.config.models import RepoTreeConfig

CONTROL_DIR_NAME = ".repotree"
CONFIG_FILE_NAME = "config.json"


@dataclass(frozen=True)
class Workspace:
    """
    Root of a repotree checkout.

    Attributes:
        root: Absolute path of the workspace root
    """

    root: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root).resolve())

    @property
    def control_dir(self) -> Path:
        """Directory holding config and the manifest checkout."""
        return self.root / CONTROL_DIR_NAME

    @property
    def config_file(self) -> Path:
        return self.control_dir / CONFIG_FILE_NAME

    @property
    def env_file(self) -> Path:
        return self.control_dir / ".env"

    def manifest_repo_dir(self, config: RepoTreeConfig) -> Path:
        """Local checkout of the manifest repository."""
        return self.control_dir / config.manifest.path

    def manifest_file(self, config: RepoTreeConfig) -> Path:
        """Manifest document inside the manifest checkout."""
        return self.manifest_repo_dir(config) / config.manifest.file

    def project_dir(self, path: str | Path) -> Path:
        """Absolute checkout directory for a workspace-relative project path."""
        p = Path(path)
        if p.is_absolute():
            return p
        return self.root / p


def find_workspace(start: Path | None = None) -> Workspace | None:
    """
    Find the workspace by searching upward for a `.repotree` directory.

    Args:
        start: Directory to start searching from. Defaults to current working directory.

    Returns:
        The enclosing Workspace, or None if not found.

    Example:
        >>> find_workspace(Path("/work/aosp/libs/foo"))
        Workspace(root=PosixPath('/work/aosp'))
    """
    if start is None:
        start = Path.cwd()

    current = start.resolve()
    while True:
        if (current / CONTROL_DIR_NAME).is_dir():
            return Workspace(current)
        if current == current.parent:
            return None
        current = current.parent


def get_workspace(start: Path | None = None) -> Workspace:
    """
    Get the enclosing workspace, raising an error if not found.

    Raises:
        WorkspaceNotFoundError: If no `.repotree` directory exists above start.
    """
    workspace = find_workspace(start)
    if workspace is None:
        start_dir = start.resolve() if start else Path.cwd()
        raise WorkspaceNotFoundError(
            f"No project root is found from {start_dir} (expected a {CONTROL_DIR_NAME} directory)"
        )
    return workspace
