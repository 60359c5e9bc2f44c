"""
Exception hierarchy for repotree.

Errors are grouped by how the sync engine treats them:

- ConfigurationError: a project cannot be turned into a job (skipped)
- ResolutionError: a revision specifier cannot be resolved (job fails)
- RemoteMismatchError: checkout belongs to another remote (job fails)
- SandboxError: a copy/link directive leaves its root (job fails)
- GitError: the git engine reported a failure (job fails)
"""

from __future__ import annotations

from pathlib import Path


class RepoTreeError(Exception):
    """Base exception for all repotree errors."""

    pass


# ==============================================================================
# Manifest defaulting
# ==============================================================================


class ConfigurationError(RepoTreeError):
    """A project lacks the information needed to build a sync job."""

    pass


class NoRevisionError(ConfigurationError):
    """Neither the project nor the manifest defaults name a revision."""

    pass


class NoRemoteError(ConfigurationError):
    """Neither the project nor the manifest defaults name a remote."""

    pass


class UnknownRemoteError(ConfigurationError):
    """The project refers to a remote that the manifest does not declare."""

    pass


class ManifestError(RepoTreeError):
    """The manifest document cannot be read or parsed."""

    pass


# ==============================================================================
# Revision resolution
# ==============================================================================


class ResolutionError(RepoTreeError):
    """A revision specifier could not be resolved to a commit."""

    def __init__(self, message: str, revision: str):
        super().__init__(message)
        self.revision = revision


class InvalidHashFormatError(ResolutionError):
    """Hexadecimal specifier that is not a full object id."""

    pass


class InvalidTagError(ResolutionError):
    """Tag reference that does not exist in the repository."""

    pass


class InvalidRemoteBranchError(ResolutionError):
    """Branch name that does not exist on the remote."""

    pass


# ==============================================================================
# Repository state
# ==============================================================================


class RemoteMismatchError(RepoTreeError):
    """Existing checkout is configured for a different remote URL."""

    def __init__(self, path: str, expected_url: str, actual_url: str):
        super().__init__(
            f"The repo {path} has different remote ({actual_url} != {expected_url}). "
            "Use --force-sync to force the updating."
        )
        self.path = path
        self.expected_url = expected_url
        self.actual_url = actual_url


class GitError(RepoTreeError):
    """Exception raised when a git operation fails."""

    def __init__(
        self,
        message: str,
        step: str = "",
        command: list[str] | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.step = step
        self.command = command
        self.stderr = stderr


class RefNotFoundError(GitError):
    """A reference could not be resolved to a commit."""

    pass


# ==============================================================================
# Copy/link sandbox
# ==============================================================================


class SandboxError(RepoTreeError):
    """A copyfile/linkfile directive is not allowed."""

    pass


class EmptyPathError(SandboxError):
    """Directive src or dest is empty."""

    pass


class AbsolutePathError(SandboxError):
    """Directive src or dest is an absolute path."""

    pass


class PathEscapeError(SandboxError):
    """Directive path resolves outside of its root."""

    pass


class NotAFileError(SandboxError):
    """Copy source is not an existing regular file."""

    pass


# ==============================================================================
# Workspace and configuration
# ==============================================================================


class WorkspaceNotFoundError(RepoTreeError):
    """No .repotree directory was found above the start directory."""

    pass


class ConfigError(RepoTreeError):
    """The persisted run configuration is invalid."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class ConfigNotFoundError(ConfigError):
    """The persisted run configuration does not exist."""

    pass


class ManifestCheckoutExistsError(RepoTreeError):
    """A local manifest checkout is already present."""

    pass
