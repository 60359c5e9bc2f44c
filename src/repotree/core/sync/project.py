"""
Per-project synchronization.

A project checkout is either absent or present. `ProjectSyncer.sync`
decides what to do with it:

- absent (no .git in the checkout directory): clone (init, add remote,
  fetch, detached checkout, pin)
- present, same remote URL: update (fetch, re-pin only when the target moved)
- present, different remote URL: fail, or delete and re-clone when forced

Copy/link directives are checked for sandbox violations before the
checkout is touched and materialized after a successful clone/update.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from repotree.core.errors import GitError, RemoteMismatchError
from repotree.core.git import FetchResult, GitRepository, resolve_revision
from repotree.core.workspace import Workspace

from .materialize import FileMaterializer
from .models import SyncJob, SyncOutcome

logger = logging.getLogger(__name__)

PINNED_BRANCH = "manifest-rev"


def pin_revision(
    repo: GitRepository,
    remote: str,
    revision: str,
    branch: str,
    *,
    detach: bool = True,
    log: logging.Logger | logging.LoggerAdapter = logger,
) -> bool:
    """
    Fetch a remote and move `branch` to the commit `revision` resolves to.

    Nothing is checked out when both the branch and HEAD already point at
    that commit.

    Args:
        repo: Repository to update
        remote: Remote to fetch and resolve branch names against
        revision: Revision specifier
        branch: Local branch that tracks the resolved commit
        detach: Check out the commit with a detached HEAD instead of
            switching to branch
        log: Logger for progress messages

    Returns:
        True if the commit was checked out

    Raises:
        GitError: If fetch or checkout fails
        ResolutionError: If the revision cannot be resolved
    """
    if repo.fetch(remote) == FetchResult.UP_TO_DATE:
        log.info("Remote up-to-date")

    commit = resolve_revision(repo, remote, revision)

    current = repo.find_branch(branch)
    head = repo.head_commit()
    log.debug("local %s: %s, HEAD: %s, target: %s", branch, current, head, commit)
    if current == commit and head == commit:
        return False

    if not detach:
        # -B resets the branch in place, it may be the checked out one
        repo.checkout(commit, branch=branch, force=True)
        return True

    # the branch only moves once the worktree is at commit
    repo.checkout(commit, force=True)
    if current != commit:
        log.debug("Move local branch %s to %s", branch, commit)
        repo.create_branch(branch, commit)
    return True


class ProjectSyncer:
    """
    Brings one project checkout to its manifest revision.

    Example:
        >>> syncer = ProjectSyncer(workspace)
        >>> outcome = syncer.sync(job)
        >>> outcome
        <SyncOutcome.CLONED: 'cloned'>
    """

    def __init__(
        self,
        workspace: Workspace,
        materializer: FileMaterializer | None = None,
        pinned_branch: str = PINNED_BRANCH,
    ):
        self.workspace = workspace
        self.materializer = materializer or FileMaterializer(workspace)
        self.pinned_branch = pinned_branch

    def sync(
        self, job: SyncJob, log: logging.Logger | logging.LoggerAdapter = logger
    ) -> SyncOutcome:
        """
        Synchronize the checkout of a job.

        Returns:
            What was done to the checkout

        Raises:
            RemoteMismatchError: Checkout has another remote and job.force is off
            ResolutionError: Revision cannot be resolved
            SandboxError: A copy/link directive is invalid
            GitError: A git step failed
        """
        repo_dir = self.workspace.project_dir(job.path)
        self.materializer.check(repo_dir, job.copyfiles, job.linkfiles)

        if self.is_checkout(repo_dir):
            mismatch = self._remote_mismatch(repo_dir, job, log)
            if mismatch is not None:
                if not job.force:
                    raise RemoteMismatchError(job.path, job.url, mismatch)
                log.info("The repo %s has different remote. Force update.", job.path)
                self._recreate_dir(repo_dir)
                self.clone(repo_dir, job, log)
                outcome = SyncOutcome.RECLONED
            else:
                moved = self.update(repo_dir, job, log)
                outcome = SyncOutcome.UPDATED if moved else SyncOutcome.UNCHANGED
        else:
            self.clone(repo_dir, job, log)
            outcome = SyncOutcome.CLONED

        self.materializer.apply(repo_dir, job.copyfiles, job.linkfiles)
        return outcome

    def clone(
        self, repo_dir: Path, job: SyncJob, log: logging.Logger | logging.LoggerAdapter = logger
    ) -> None:
        """Create a checkout from scratch. A partial directory is left on failure."""
        log.info("Clone repo")
        repo = GitRepository.init(repo_dir)

        log.debug("create remote")
        repo.create_remote(job.remote, job.url)

        log.debug("fetch remote")
        repo.fetch(job.remote)

        commit = resolve_revision(repo, job.remote, job.revision)

        repo.checkout(commit)
        log.debug("create branch %s at %s", self.pinned_branch, commit)
        repo.create_branch(self.pinned_branch, commit)

    def update(
        self, repo_dir: Path, job: SyncJob, log: logging.Logger | logging.LoggerAdapter = logger
    ) -> bool:
        """Update an existing checkout. Returns True if a checkout happened."""
        log.info("Pull update")
        repo = GitRepository.open(repo_dir)
        return pin_revision(repo, job.remote, job.revision, self.pinned_branch, log=log)

    def _remote_mismatch(
        self, repo_dir: Path, job: SyncJob, log: logging.Logger | logging.LoggerAdapter
    ) -> str | None:
        """
        URL of the checkout's first remote when it differs from the job URL.

        A repository without remotes is treated as matching. So is a
        directory that cannot be opened; the update step reports that.
        """
        try:
            urls = GitRepository.open(repo_dir).remote_urls()
        except GitError as e:
            log.error("%s", e)
            return None

        if not urls:
            return None

        log.debug("remoteURL: %s", urls[0])
        log.debug("jobURL: %s", job.url)
        if urls[0] == job.url:
            return None
        return urls[0]

    @staticmethod
    def is_checkout(repo_dir: Path) -> bool:
        """A directory holding a git repository (the PRESENT state)."""
        return (repo_dir / ".git").exists()

    @staticmethod
    def _recreate_dir(repo_dir: Path) -> None:
        shutil.rmtree(repo_dir)
        repo_dir.mkdir(parents=True)
