"""
Manifest-driven synchronization of project checkouts.

Example:
    >>> from repotree.core.sync import ManifestRepository, SyncScheduler
    >>> manifest_repo = ManifestRepository(workspace, config)
    >>> manifest_repo.sync()
    >>> result = SyncScheduler(workspace).run(manifest_repo.load(), jobs=4)
    >>> result.failed
    False
"""

from .manifest_repo import ManifestRepository
from .materialize import FileMaterializer, sandboxed_path
from .models import SkippedProject, SyncJob, SyncOutcome, SyncRunResult
from .project import PINNED_BRANCH, ProjectSyncer, pin_revision
from .scheduler import SyncCallback, SyncScheduler, resolve_worker_count

__all__ = [
    "FileMaterializer",
    "ManifestRepository",
    "PINNED_BRANCH",
    "ProjectSyncer",
    "SkippedProject",
    "SyncCallback",
    "SyncJob",
    "SyncOutcome",
    "SyncRunResult",
    "SyncScheduler",
    "pin_revision",
    "resolve_worker_count",
    "sandboxed_path",
]
