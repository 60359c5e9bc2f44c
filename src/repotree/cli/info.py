"""
Repotree CLI - Info command.
"""

import logging

import typer
from rich.console import Console
from rich.table import Table

from repotree.cli.common import open_manifest, open_workspace
from repotree.cli.errors import ExitCode, print_git_error
from repotree.core.errors import GitError, RepoTreeError
from repotree.core.report import WorkspaceReport
from repotree.core.sync import ManifestRepository

console = Console()
logger = logging.getLogger(__name__)


def info(
    show_url: bool = typer.Option(
        False,
        "--show-url",
        help="Print URLs of repositories",
    ),
) -> None:
    """
    Compare the checked out revision of every project with its manifest revision.

    The first row is the manifest repository itself.
    """
    workspace, config = open_workspace()
    manifest = open_manifest(workspace, config)
    manifest_repo = ManifestRepository(workspace, config)

    try:
        manifest_head = manifest_repo.head_commit()
    except GitError as e:
        print_git_error("Fail to open manifest repository", e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    table = Table(show_footer=True)
    table.add_column("Path", footer="Total", style="cyan")
    table.add_column("Current revision", footer=str(len(manifest.projects)))
    table.add_column("Manifest revision", style="blue")
    if show_url:
        table.add_column("Url")

    manifest_row = [manifest_repo.path.name, manifest_head or "", ""]
    if show_url:
        manifest_row.append(config.manifest.url or "")
    table.add_row(*manifest_row, end_section=True)

    report = WorkspaceReport(workspace, manifest)
    for project in manifest.projects:
        try:
            revs = report.revisions(project)
        except RepoTreeError as e:
            logger.error("Fail to get rev of %s: %s", project.path, e)
            continue

        logger.debug("%s: %s, %s", revs.path, revs.current, revs.manifest_revision)
        style = None if revs.in_sync else "yellow"
        row = [revs.path, revs.current, revs.manifest_display]
        if show_url:
            row.append(revs.url)
        table.add_row(*row, style=style)

    console.print(table)
