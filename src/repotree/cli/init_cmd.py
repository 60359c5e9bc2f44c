"""
Init command implementation.

`repotree init` turns the current directory into a workspace:

- creates the `.repotree/` control directory
- clones the manifest repository at the requested branch
- parses the manifest once to make sure it is usable
- saves the run configuration used by every other command
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from repotree.cli.errors import ExitCode, print_error, print_git_error, print_manifest_error
from repotree.core.config import ManifestSettings, RepoTreeConfig, save_config
from repotree.core.errors import GitError, ManifestCheckoutExistsError, ManifestError
from repotree.core.manifest import Manifest
from repotree.core.sync import ManifestRepository
from repotree.core.workspace import Workspace

console = Console()
logger = logging.getLogger(__name__)


def dump_manifest(manifest: Manifest) -> None:
    """Print the remotes, defaults and projects of a parsed manifest."""
    remotes = Table(title="Remotes")
    remotes.add_column("Name", style="cyan")
    remotes.add_column("Fetch")
    for remote in manifest.remotes:
        remotes.add_row(remote.name, remote.fetch)
    console.print(remotes)

    defaults = manifest.defaults
    console.print("[bold]Defaults[/bold]")
    console.print(f"  revision: {defaults.revision or '-'}")
    console.print(f"  remote:   {defaults.remote or '-'}")
    console.print(f"  sync-j:   {defaults.sync_j or '-'}")
    for key, value in defaults.extra.items():
        console.print(f"  {key}: {value}")

    projects = Table(title="Projects")
    projects.add_column("Name", style="cyan")
    projects.add_column("Path", style="green")
    projects.add_column("Remote")
    projects.add_column("Revision", style="blue")
    projects.add_column("Copy/Link", justify="right")
    for project in manifest.projects:
        projects.add_row(
            project.name,
            project.path,
            project.remote,
            project.revision,
            f"{len(project.copyfiles)}/{len(project.linkfiles)}",
        )
    console.print(projects)


def main(
    url: str = typer.Option(
        ...,
        "--url",
        "-u",
        help="The URL of the manifest repository",
    ),
    manifest_file: str = typer.Option(
        "default.xml",
        "--manifest",
        "-m",
        help="Manifest file inside the manifest repository",
    ),
    branch: str = typer.Option(
        "main",
        "--branch",
        "-b",
        help="Branch of the manifest repository",
    ),
    dump: bool = typer.Option(
        False,
        "--dump",
        help="Print the parsed manifest",
    ),
    force_delete: bool = typer.Option(
        False,
        "--force-delete",
        help="Delete the local manifest repository if it exists",
    ),
) -> None:
    """
    Initialize a workspace in the current directory.

    Examples:
        repotree init -u https://git.example.com/manifest.git
        repotree init -u ../manifest -b stable -m release.xml --dump
    """
    workspace = Workspace(Path.cwd())
    config = RepoTreeConfig(
        manifest=ManifestSettings(url=url, file=manifest_file, branch=branch),
    )
    manifest_repo = ManifestRepository(workspace, config)

    try:
        manifest_repo.init(url, force_delete=force_delete)
    except ManifestCheckoutExistsError as e:
        print_error(str(e), solution="repotree init --force-delete ...")
        raise typer.Exit(ExitCode.USER_ERROR)
    except GitError as e:
        print_git_error("Fail to clone manifest", e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    try:
        manifest = manifest_repo.load()
    except ManifestError as e:
        print_manifest_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)

    if dump:
        dump_manifest(manifest)

    save_config(workspace, config)
    console.print(
        f"[green]✓[/green] Initialized workspace at {workspace.root} "
        f"({len(manifest.projects)} projects)"
    )
