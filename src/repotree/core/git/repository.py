"""
Git repository wrapper.

This module provides the GitRepository class, the only place where
repotree talks to git. It wraps GitPython and converts every GitPython
exception into a GitError that records which step failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.refs.head import Head
from git.remote import FetchInfo

from repotree.core.errors import GitError, RefNotFoundError

logger = logging.getLogger(__name__)


class FetchResult(str, Enum):
    """Outcome of a successful fetch."""

    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"


@dataclass
class FileStatus:
    """
    Working tree status of one path.

    Attributes:
        path: Path relative to the repository root
        staging: Index status code (porcelain X column)
        worktree: Working tree status code (porcelain Y column)
    """

    path: str
    staging: str
    worktree: str

    @staticmethod
    def _code(c: str) -> str:
        return "-" if c == " " else c

    @property
    def indicator(self) -> str:
        """Two-character code, `-` standing for unmodified."""
        return f"{self._code(self.staging)}{self._code(self.worktree)}"


def _stderr_of(e: GitCommandError) -> str:
    return str(e.stderr or "").strip()


class GitRepository:
    """
    A local git repository.

    Example:
        >>> repo = GitRepository.init(Path("libs/foo"))
        >>> repo.create_remote("origin", "https://git.example.com/lib/foo")
        >>> repo.fetch("origin")
        <FetchResult.UPDATED: 'updated'>
        >>> sha = repo.resolve("refs/remotes/origin/main")
        >>> repo.checkout(sha)
    """

    def __init__(self, repo: Repo):
        self.repo = repo

    @property
    def path(self) -> Path:
        return Path(self.repo.working_tree_dir or self.repo.git_dir)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def open(cls, path: Path) -> GitRepository:
        """
        Open an existing repository.

        Raises:
            GitError: If path is not a git repository
        """
        try:
            return cls(Repo(path))
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise GitError(
                f"Fail to open git repo {path}: not a git repository", step="open"
            ) from e

    @classmethod
    def init(cls, path: Path) -> GitRepository:
        """
        Initialize an empty repository at path.

        Raises:
            GitError: If initialization fails
        """
        try:
            return cls(Repo.init(path))
        except (GitCommandError, OSError) as e:
            raise GitError(f"Fail to init new repo {path}: {e}", step="init") from e

    @classmethod
    def clone(cls, url: str, path: Path, branch: str | None = None) -> GitRepository:
        """
        Clone url into path, optionally checking out branch.

        Raises:
            GitError: If the clone fails
        """
        kwargs: dict[str, Any] = {}
        if branch:
            kwargs["branch"] = branch
        try:
            return cls(Repo.clone_from(url, path, **kwargs))
        except GitCommandError as e:
            raise GitError(
                f"Fail to clone {url}: {_stderr_of(e)}",
                step="clone",
                command=[str(c) for c in e.command],
                stderr=_stderr_of(e),
            ) from e

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _run_git(self, step: str, command: str, *args: str, **kwargs: Any) -> str:
        """
        Run a git subcommand and return its stdout.

        Raises:
            GitError: If the command exits non-zero.
        """
        logger.debug("git %s %s (%s)", command, " ".join(args), self.path)
        try:
            output: str = getattr(self.repo.git, command.replace("-", "_"))(*args, **kwargs)
            return output
        except GitCommandError as e:
            raise GitError(
                f"Fail to {step}: {_stderr_of(e)}",
                step=step,
                command=[str(c) for c in e.command],
                stderr=_stderr_of(e),
            ) from e

    # ------------------------------------------------------------------
    # Remotes
    # ------------------------------------------------------------------

    def remote_urls(self) -> list[str]:
        """First configured URL of each remote, in config order."""
        urls: list[str] = []
        for remote in self.repo.remotes:
            try:
                remote_urls = list(remote.urls)
            except GitCommandError as e:
                raise GitError(
                    f"Can not read the remotes: {_stderr_of(e)}", step="remote"
                ) from e
            if remote_urls:
                urls.append(remote_urls[0])
        return urls

    def create_remote(self, name: str, url: str) -> None:
        """
        Register a remote.

        Raises:
            GitError: If the remote cannot be created
        """
        try:
            self.repo.create_remote(name, url)
        except GitCommandError as e:
            raise GitError(
                f"Fail to create new remote {name}: {_stderr_of(e)}",
                step="remote",
                stderr=_stderr_of(e),
            ) from e

    def fetch(self, remote_name: str) -> FetchResult:
        """
        Fetch from a named remote.

        Returns:
            UP_TO_DATE if no reference changed, UPDATED otherwise

        Raises:
            GitError: If the remote is missing or the fetch fails
        """
        try:
            remote = self.repo.remote(remote_name)
            infos = remote.fetch()
        except ValueError as e:
            raise GitError(f"Fail to fetch update from {remote_name}: {e}", step="fetch") from e
        except GitCommandError as e:
            raise GitError(
                f"Fail to fetch update from {remote_name}: {_stderr_of(e)}",
                step="fetch",
                command=[str(c) for c in e.command],
                stderr=_stderr_of(e),
            ) from e

        if all(info.flags & FetchInfo.HEAD_UPTODATE for info in infos):
            return FetchResult.UP_TO_DATE
        return FetchResult.UPDATED

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def find_branch(self, name: str) -> str | None:
        """
        Commit a local branch points to.

        Returns:
            Commit SHA, or None if the branch does not exist
        """
        for ref in self.repo.references:
            if not isinstance(ref, Head):
                continue
            if ref.name == name:
                try:
                    return str(ref.object.hexsha)
                except ValueError:
                    return None
        return None

    def resolve(self, refname: str) -> str:
        """
        Resolve a reference to the commit it (eventually) points to.

        Annotated tags are peeled.

        Raises:
            RefNotFoundError: If the reference does not exist
        """
        try:
            return str(self.repo.git.rev_parse("--verify", "--quiet", f"{refname}^{{commit}}"))
        except GitCommandError as e:
            raise RefNotFoundError(
                f"Reference not found: {refname}", step="resolve", stderr=_stderr_of(e)
            ) from e

    def create_branch(self, name: str, commit: str) -> None:
        """Create refs/heads/<name> pointing at commit."""
        self._run_git("create branch", "update-ref", f"refs/heads/{name}", commit)

    def delete_branch(self, name: str) -> None:
        """Delete refs/heads/<name>, even when it is checked out."""
        self._run_git("remove branch", "update-ref", "-d", f"refs/heads/{name}")

    def head_commit(self) -> str | None:
        """Commit HEAD points to, or None for an unborn HEAD."""
        try:
            return str(self.repo.head.commit.hexsha)
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # Working tree
    # ------------------------------------------------------------------

    def checkout(self, commit: str, branch: str | None = None, force: bool = False) -> None:
        """
        Check out a commit.

        Args:
            commit: Commit SHA to check out
            branch: If set, create or reset this branch at commit and switch to it;
                otherwise HEAD is detached at commit
            force: Discard local modifications

        Raises:
            GitError: If the checkout fails
        """
        args: list[str] = []
        if force:
            args.append("--force")
        if branch:
            args.extend(["-B", branch, commit])
        else:
            args.extend(["--detach", commit])
        self._run_git("checkout worktree", "checkout", *args)

    def status(self) -> list[FileStatus]:
        """Per-path working tree status (porcelain v1)."""
        output = self._run_git(
            "get worktree status", "status", "--porcelain", "-z", strip_newline_in_stdout=False
        )
        entries = output.split("\0")
        statuses: list[FileStatus] = []
        i = 0
        while i < len(entries):
            entry = entries[i]
            i += 1
            if len(entry) < 4:
                continue
            x, y, path = entry[0], entry[1], entry[3:]
            statuses.append(FileStatus(path=path, staging=x, worktree=y))
            if x in ("R", "C"):
                # -z puts the rename source in the next entry
                i += 1
        return statuses
