"""
Read-only views of the workspace for `repotree info` and `repotree status`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from repotree.core.errors import GitError
from repotree.core.git import FileStatus, GitRepository, resolve_revision
from repotree.core.manifest import Manifest, Project
from repotree.core.workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class ProjectRevisions:
    """
    Where a checkout is compared with where the manifest wants it.

    Attributes:
        path: Workspace-relative checkout path
        current: Commit HEAD points to
        manifest_revision: Revision specifier from the manifest
        manifest_commit: Commit the specifier resolves to
        url: Resolved fetch URL
    """

    path: str
    current: str
    manifest_revision: str
    manifest_commit: str
    url: str

    @property
    def manifest_display(self) -> str:
        """Resolved commit, followed by the specifier when they differ."""
        if self.manifest_revision == self.manifest_commit:
            return self.manifest_revision
        return f"{self.manifest_commit} ({self.manifest_revision})"

    @property
    def in_sync(self) -> bool:
        return self.current == self.manifest_commit


class WorkspaceReport:
    """
    Collects revision and working tree information for manifest projects.

    Example:
        >>> report = WorkspaceReport(workspace, manifest)
        >>> for project in manifest.projects:
        ...     print(report.revisions(project).manifest_display)
    """

    def __init__(self, workspace: Workspace, manifest: Manifest):
        self.workspace = workspace
        self.manifest = manifest

    def _open(self, project: Project) -> GitRepository:
        return GitRepository.open(self.workspace.project_dir(project.path))

    def revisions(self, project: Project) -> ProjectRevisions:
        """
        Current and manifest revisions of a project.

        Raises:
            RepoTreeError: If the checkout cannot be opened, the manifest
                entry is incomplete or the revision cannot be resolved
        """
        repo = self._open(project)
        current = repo.head_commit()
        if current is None:
            raise GitError(f"Fail to resolve revision of {project.path}: HEAD is unborn")

        remote, url = self.manifest.resolve_remote(project)
        revision = self.manifest.resolve_revision(project)
        commit = resolve_revision(repo, remote, revision)

        return ProjectRevisions(
            path=project.path,
            current=current,
            manifest_revision=revision,
            manifest_commit=commit,
            url=url,
        )

    def status(self, project: Project) -> list[FileStatus]:
        """
        Working tree status of a project checkout.

        Raises:
            GitError: If the checkout cannot be opened or queried
        """
        return self._open(project).status()
