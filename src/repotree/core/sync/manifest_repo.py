"""
Manifest repository checkout.

The manifest document lives in its own git repository, cloned into the
workspace control directory by `repotree init`. Before every sync the
checkout is refreshed the same way a project is updated, except that the
tracked branch itself is moved and checked out instead of a detached HEAD.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from repotree.core.config import RepoTreeConfig
from repotree.core.errors import ManifestCheckoutExistsError
from repotree.core.git import GitRepository
from repotree.core.manifest import Manifest, load_manifest
from repotree.core.workspace import Workspace

from .project import pin_revision

logger = logging.getLogger(__name__)

MANIFEST_REMOTE = "origin"


class ManifestRepository:
    """
    The local manifest checkout of a workspace.

    Example:
        >>> manifest_repo = ManifestRepository(workspace, config)
        >>> manifest_repo.sync()
        >>> manifest = manifest_repo.load()
    """

    def __init__(self, workspace: Workspace, config: RepoTreeConfig):
        self.workspace = workspace
        self.config = config

    @property
    def path(self) -> Path:
        return self.workspace.manifest_repo_dir(self.config)

    @property
    def manifest_file(self) -> Path:
        return self.workspace.manifest_file(self.config)

    @property
    def branch(self) -> str:
        return self.config.manifest.branch

    def exists(self) -> bool:
        return self.path.is_dir()

    def init(self, url: str, force_delete: bool = False) -> GitRepository:
        """
        Clone the manifest repository at the configured branch.

        Args:
            url: Manifest repository URL
            force_delete: Remove an existing manifest checkout first

        Raises:
            ManifestCheckoutExistsError: If a checkout exists and force_delete is off
            GitError: If the clone fails
        """
        self.workspace.control_dir.mkdir(parents=True, exist_ok=True)

        if self.exists():
            if not force_delete:
                raise ManifestCheckoutExistsError(
                    f"There is existing local manifest ({self.path}). "
                    "Please use '--force-delete' to delete it before cloning"
                )
            logger.info("Removing existing manifest checkout %s", self.path)
            shutil.rmtree(self.path)

        logger.info("Cloning manifest %s (branch %s)", url, self.branch)
        return GitRepository.clone(url, self.path, branch=self.branch)

    def sync(self) -> bool:
        """
        Refresh the manifest checkout to the tip of the tracked branch.

        Returns:
            True if the checkout moved

        Raises:
            GitError: If the checkout cannot be opened, fetched or checked out
            ResolutionError: If the branch does not exist on the remote
        """
        repo = GitRepository.open(self.path)
        moved = pin_revision(repo, MANIFEST_REMOTE, self.branch, self.branch, detach=False)
        if moved:
            logger.info("Manifest updated to %s", repo.head_commit())
        else:
            logger.info("Manifest up-to-date")
        return moved

    def load(self) -> Manifest:
        """
        Parse the manifest document.

        Raises:
            ManifestError: If the file is missing or malformed
        """
        return load_manifest(self.manifest_file)

    def head_commit(self) -> str | None:
        return GitRepository.open(self.path).head_commit()
