"""
Repotree CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

from pathlib import Path

import typer
from rich.console import Console

from repotree import __version__
from repotree.cli import info, init_cmd, status, sync
from repotree.cli.common import configure_logging
from repotree.core.config.env import load_layered_env
from repotree.core.workspace import find_workspace

# Create the main Typer app
app = typer.Typer(
    name="repotree",
    help="Keep a tree of git repositories at the revisions pinned by a manifest",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    Repotree - manifest-driven multi-repository checkouts.

    A manifest repository lists remotes and projects. Every project is
    cloned into the workspace and kept at the revision the manifest pins.

    Quick Start:
        1. repotree init -u <manifest-url>   # Create a workspace here
        2. repotree sync -j 4                # Clone/update every project
        3. repotree info                     # Compare revisions

    Documentation:
        repotree --help                      # This message
        repotree <command> --help            # Help for specific command
    """
    configure_logging(debug)

    # Precedence: OS env > workspace .env > user .env
    workspace = find_workspace(Path.cwd())
    load_layered_env(workspace_env_paths=[workspace.env_file] if workspace else None)

    ctx.obj = {"debug": debug}


app.command(name="init")(init_cmd.main)
app.command(name="sync")(sync.sync)
app.command(name="status")(status.status)
app.command(name="info")(info.info)


@app.command()
def version() -> None:
    """Show repotree version and exit."""
    console.print(f"repotree version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
