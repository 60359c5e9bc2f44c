"""
Data models for the sync engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from repotree.core.errors import ConfigurationError
from repotree.core.manifest import Copyfile, Linkfile, Manifest, Project


class SyncOutcome(str, Enum):
    """What a job did to its checkout."""

    CLONED = "cloned"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    RECLONED = "recloned"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncJob:
    """
    One project to synchronize.

    Jobs are values: a worker never mutates the job it received, it
    returns a copy with the result fields filled in (see `with_result`).

    Attributes:
        url: Resolved fetch URL
        remote: Resolved remote name
        revision: Revision specifier to resolve after fetching
        path: Workspace-relative checkout path
        force: Allow deleting a checkout that has a different remote
        copyfiles: Copy directives applied after checkout
        linkfiles: Link directives applied after checkout
        error: Failure, if the job failed
        outcome: What the job did, once processed
        duration_seconds: Processing time, once processed
    """

    url: str
    remote: str
    revision: str
    path: str
    force: bool = False
    copyfiles: tuple[Copyfile, ...] = ()
    linkfiles: tuple[Linkfile, ...] = ()
    error: Exception | None = None
    outcome: SyncOutcome | None = None
    duration_seconds: float = 0.0

    @classmethod
    def from_project(cls, manifest: Manifest, project: Project, force: bool = False) -> SyncJob:
        """
        Build a job from a manifest project, applying defaults.

        Raises:
            ConfigurationError: If the revision or remote cannot be determined.
        """
        remote, url = manifest.resolve_remote(project)
        revision = manifest.resolve_revision(project)
        return cls(
            url=url,
            remote=remote,
            revision=revision,
            path=project.path,
            force=force,
            copyfiles=project.copyfiles,
            linkfiles=project.linkfiles,
        )

    @property
    def failed(self) -> bool:
        return self.error is not None

    def with_result(
        self,
        outcome: SyncOutcome,
        error: Exception | None = None,
        duration_seconds: float = 0.0,
    ) -> SyncJob:
        """Copy of this job carrying its result."""
        return replace(self, error=error, outcome=outcome, duration_seconds=duration_seconds)


@dataclass
class SkippedProject:
    """A manifest project that could not be turned into a job."""

    name: str
    path: str
    error: ConfigurationError


@dataclass
class SyncRunResult:
    """
    Aggregate result of a sync run.

    Attributes:
        jobs: Processed jobs, in completion order
        skipped: Projects skipped during job construction
        workers: Number of workers used
        total_duration: Wall-clock time of the run
    """

    jobs: list[SyncJob] = field(default_factory=list)
    skipped: list[SkippedProject] = field(default_factory=list)
    workers: int = 0
    total_duration: float = 0.0

    @property
    def failed(self) -> bool:
        """True if any dispatched job failed."""
        return any(job.failed for job in self.jobs)

    @property
    def failed_jobs(self) -> list[SyncJob]:
        return [job for job in self.jobs if job.failed]

    def count(self, outcome: SyncOutcome) -> int:
        return sum(1 for job in self.jobs if job.outcome == outcome)
