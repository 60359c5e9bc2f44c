"""
Parallel project synchronization.

This module provides the SyncScheduler class, which turns the projects of
a manifest into SyncJobs and runs them on a fixed pool of worker threads.

One dispatcher thread builds the jobs in manifest order and feeds them
through a bounded queue; workers push finished jobs onto a result queue.
The collector waits for exactly as many results as jobs were dispatched,
so projects skipped during job construction never leave it waiting.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import MutableMapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Protocol

from repotree.core.errors import ConfigurationError
from repotree.core.manifest import Manifest, Project
from repotree.core.workspace import Workspace

from .models import SkippedProject, SyncJob, SyncOutcome, SyncRunResult
from .project import ProjectSyncer

logger = logging.getLogger(__name__)


class SyncCallback(Protocol):
    """Protocol for sync progress callbacks."""

    def on_start(self, num_projects: int, num_workers: int) -> None:
        """Called before the first job is dispatched.

        Args:
            num_projects: Number of projects in the manifest
            num_workers: Number of parallel workers
        """
        ...

    def on_skip(self, project: Project, error: ConfigurationError) -> None:
        """Called when a project cannot be turned into a job."""
        ...

    def on_job_complete(self, job: SyncJob) -> None:
        """Called for every finished job, in completion order."""
        ...


class _NoOpCallback:
    """Default no-op callback implementation."""

    def on_start(self, num_projects: int, num_workers: int) -> None:
        pass

    def on_skip(self, project: Project, error: ConfigurationError) -> None:
        pass

    def on_job_complete(self, job: SyncJob) -> None:
        pass


class JobLogAdapter(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Prefixes messages with the worker index and checkout path."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = self.extra or {}
        prefix = f"[worker {extra.get('worker')}]"
        if extra.get("path"):
            prefix += f" [{extra['path']} <- {extra.get('remote')}]"
        return f"{prefix} {msg}", kwargs


@dataclass
class _DispatchDone:
    """Posted on the result queue once the dispatcher has finished."""

    dispatched: int
    error: BaseException | None = None


def resolve_worker_count(manifest: Manifest, jobs: int = 0) -> int:
    """
    Number of workers for a run.

    An explicit count wins, then the manifest's advisory sync-j, then 1.
    """
    if jobs > 0:
        return jobs
    sync_j = manifest.get_sync_j()
    if sync_j > 0:
        return sync_j
    return 1


class SyncScheduler:
    """
    Synchronizes all projects of a manifest in parallel.

    A failing job never stops the others; the run as a whole fails if any
    dispatched job failed.

    Example:
        >>> scheduler = SyncScheduler(workspace)
        >>> result = scheduler.run(manifest, jobs=4)
        >>> if result.failed:
        ...     print(f"{len(result.failed_jobs)} projects failed")
    """

    def __init__(
        self,
        workspace: Workspace,
        syncer: ProjectSyncer | None = None,
        callback: SyncCallback | None = None,
    ):
        """
        Initialize the scheduler.

        Args:
            workspace: Workspace the project paths are relative to
            syncer: Per-project state machine (defaults to a ProjectSyncer)
            callback: Progress callback
        """
        self.workspace = workspace
        self.syncer = syncer or ProjectSyncer(workspace)
        self._callback = callback or _NoOpCallback()
        self._stop = threading.Event()

    def run(self, manifest: Manifest, jobs: int = 0, force: bool = False) -> SyncRunResult:
        """
        Synchronize every project of the manifest.

        Args:
            manifest: Parsed manifest
            jobs: Worker count override (0 to use the manifest's sync-j)
            force: Re-clone checkouts whose remote URL changed

        Returns:
            Aggregate result of all dispatched jobs
        """
        num_workers = resolve_worker_count(manifest, jobs)
        result = SyncRunResult(workers=num_workers)
        start_time = time.time()
        self._stop.clear()

        self._callback.on_start(len(manifest.projects), num_workers)
        logger.debug("Starting %d workers for %d projects", num_workers, len(manifest.projects))

        job_queue: queue.Queue[SyncJob | None] = queue.Queue(maxsize=num_workers)
        result_queue: queue.Queue[SyncJob | _DispatchDone] = queue.Queue()
        dispatch_error: BaseException | None = None

        with ThreadPoolExecutor(
            max_workers=num_workers, thread_name_prefix="repotree-sync"
        ) as executor:
            for idx in range(num_workers):
                executor.submit(self._worker, idx, job_queue, result_queue)

            dispatcher = threading.Thread(
                target=self._dispatch,
                args=(manifest, force, job_queue, result_queue, result),
                name="repotree-dispatch",
                daemon=True,
            )
            try:
                dispatcher.start()
                dispatch_error = self._collect(result_queue, result)
            finally:
                self._stop.set()
                for _ in range(num_workers):
                    job_queue.put(None)

        if dispatch_error is not None:
            raise dispatch_error

        result.total_duration = time.time() - start_time
        return result

    def _dispatch(
        self,
        manifest: Manifest,
        force: bool,
        job_queue: queue.Queue[SyncJob | None],
        result_queue: queue.Queue[SyncJob | _DispatchDone],
        result: SyncRunResult,
    ) -> None:
        """Build one job per project and hand it to the pool."""
        dispatched = 0
        try:
            for project in manifest.projects:
                if self._stop.is_set():
                    break
                try:
                    job = SyncJob.from_project(manifest, project, force=force)
                except ConfigurationError as e:
                    logger.warning("Skip the job %s: %s", project.name or project.path, e)
                    result.skipped.append(SkippedProject(project.name, project.path, e))
                    self._callback.on_skip(project, e)
                    continue

                self._setup_parent_dir(job)
                job_queue.put(job)
                dispatched += 1
        except BaseException as e:
            result_queue.put(_DispatchDone(dispatched, error=e))
            return
        result_queue.put(_DispatchDone(dispatched))

    def _collect(
        self,
        result_queue: queue.Queue[SyncJob | _DispatchDone],
        result: SyncRunResult,
    ) -> BaseException | None:
        """Wait until every dispatched job has reported back."""
        expected: int | None = None
        dispatch_error: BaseException | None = None
        collected = 0

        while expected is None or collected < expected:
            item = result_queue.get()
            if isinstance(item, _DispatchDone):
                expected = item.dispatched
                dispatch_error = item.error
                continue

            collected += 1
            result.jobs.append(item)
            if item.failed:
                logger.error("Job %s failed", item.path)
            self._callback.on_job_complete(item)

        return dispatch_error

    def _worker(
        self,
        idx: int,
        job_queue: queue.Queue[SyncJob | None],
        result_queue: queue.Queue[SyncJob | _DispatchDone],
    ) -> None:
        wlog = JobLogAdapter(logger, {"worker": idx})
        while True:
            job = job_queue.get()
            if job is None:
                wlog.debug("exit")
                return
            if self._stop.is_set():
                continue
            try:
                done = self._execute_job(idx, job)
            except Exception as e:
                # the collector waits for one result per dispatched job
                wlog.exception("Worker failed on %s", job.path)
                done = replace(job, outcome=SyncOutcome.FAILED, error=e)
            result_queue.put(done)

    def _execute_job(self, idx: int, job: SyncJob) -> SyncJob:
        """Run the state machine for one job and return the job with its result."""
        jlog = JobLogAdapter(logger, {"worker": idx, "path": job.path, "remote": job.remote})
        jlog.debug("Repo: %s", job.url)

        start_time = time.time()
        try:
            outcome = self.syncer.sync(job, jlog)
        except Exception as e:
            duration = time.time() - start_time
            jlog.error("Fail to do job (dur %.0fs): %s", duration, e)
            return job.with_result(SyncOutcome.FAILED, error=e, duration_seconds=duration)

        duration = time.time() - start_time
        jlog.info("Job done: %s (dur %.0fs)", outcome.value, duration)
        return job.with_result(outcome, duration_seconds=duration)

    def _setup_parent_dir(self, job: SyncJob) -> None:
        parent = self.workspace.project_dir(job.path).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Fail to create %s: %s", parent, e)
