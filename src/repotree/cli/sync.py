"""
Repotree CLI - Sync command.

Refreshes the manifest repository, then brings every project checkout to
the revision the manifest pins it to.
"""

import logging

import typer
from rich.console import Console
from rich.markup import escape

from repotree.cli.common import open_manifest, open_workspace
from repotree.cli.errors import ExitCode, print_error, print_git_error
from repotree.core.errors import ConfigurationError, GitError, ResolutionError
from repotree.core.manifest import Project
from repotree.core.sync import (
    ManifestRepository,
    SyncJob,
    SyncOutcome,
    SyncRunResult,
    SyncScheduler,
)

console = Console()
logger = logging.getLogger(__name__)

_OUTCOME_STYLE = {
    SyncOutcome.CLONED: "[green]✓[/green]",
    SyncOutcome.UPDATED: "[green]✓[/green]",
    SyncOutcome.RECLONED: "[yellow]✓[/yellow]",
    SyncOutcome.UNCHANGED: "[dim]·[/dim]",
}


class ConsoleSyncCallback:
    """Prints one line per finished or skipped project."""

    def __init__(self, out: Console):
        self.out = out

    def on_start(self, num_projects: int, num_workers: int) -> None:
        self.out.print(f"[blue]Syncing {num_projects} projects with {num_workers} workers[/blue]")

    def on_skip(self, project: Project, error: ConfigurationError) -> None:
        name = escape(project.name or project.path)
        self.out.print(f"[yellow]⚠[/yellow]  Skipped {name}: {escape(str(error))}")

    def on_job_complete(self, job: SyncJob) -> None:
        if job.failed:
            self.out.print(f"[red]✗[/red] {escape(job.path)}: {escape(str(job.error))}")
            return
        marker = _OUTCOME_STYLE.get(job.outcome or SyncOutcome.UNCHANGED, "")
        outcome = job.outcome.value if job.outcome else ""
        self.out.print(f"{marker} {escape(job.path)} {outcome} ({job.duration_seconds:.1f}s)")


def print_summary(result: SyncRunResult) -> None:
    parts = [
        f"{result.count(outcome)} {outcome.value}"
        for outcome in SyncOutcome
        if result.count(outcome)
    ]
    if result.skipped:
        parts.append(f"{len(result.skipped)} skipped")
    summary = ", ".join(parts) or "nothing to do"

    if result.failed:
        console.print(f"[red]Sync failed:[/red] {summary} ({result.total_duration:.1f}s)")
        for job in result.failed_jobs:
            console.print(f"  [red]✗[/red] {escape(job.path)}")
    else:
        console.print(f"[green]✓[/green] Sync done: {summary} ({result.total_duration:.1f}s)")


def sync(
    jobs: int = typer.Option(
        0,
        "--jobs",
        "--tasks",
        "-j",
        min=0,
        help="Number of parallel workers (default: config, then manifest sync-j, then 1)",
    ),
    force_sync: bool = typer.Option(
        False,
        "--force-sync",
        help="Delete and re-clone checkouts whose remote URL changed",
    ),
) -> None:
    """
    Synchronize all projects to their manifest revisions.

    Examples:
        repotree sync                 # Use the configured worker count
        repotree sync -j 8            # Sync with 8 parallel workers
        repotree sync --force-sync    # Re-clone repos that moved to a new URL
    """
    workspace, config = open_workspace()
    manifest_repo = ManifestRepository(workspace, config)

    if not manifest_repo.exists():
        print_error(
            f"Manifest checkout not found: {manifest_repo.path}",
            solution="repotree init -u <manifest-url> --force-delete",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        manifest_repo.sync()
    except (GitError, ResolutionError) as e:
        print_git_error("Fail to sync manifest repository", e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    manifest = open_manifest(workspace, config)

    scheduler = SyncScheduler(workspace, callback=ConsoleSyncCallback(console))
    try:
        result = scheduler.run(manifest, jobs=jobs or config.sync.jobs, force=force_sync)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(ExitCode.SIGINT)

    print_summary(result)
    if result.failed:
        raise typer.Exit(ExitCode.GENERAL_ERROR)
