"""
Helpers shared by the repotree commands.
"""

import logging
import sys
from pathlib import Path

import typer

from repotree.cli.errors import (
    ExitCode,
    print_config_error,
    print_manifest_error,
    print_not_workspace_error,
)
from repotree.core.config import RepoTreeConfig, load_config
from repotree.core.errors import ConfigError, ManifestError, WorkspaceNotFoundError
from repotree.core.manifest import Manifest, load_manifest
from repotree.core.workspace import Workspace, get_workspace

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def configure_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
    )
    logging.getLogger("repotree").setLevel(level)
    # GitPython logs every command it runs at DEBUG
    logging.getLogger("git").setLevel(logging.INFO)


def open_workspace(start: Path | None = None) -> tuple[Workspace, RepoTreeConfig]:
    """
    Locate the enclosing workspace and load its configuration.

    Prints a user-facing error and exits with USER_ERROR on failure.
    """
    try:
        workspace = get_workspace(start)
    except WorkspaceNotFoundError:
        print_not_workspace_error()
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        config = load_config(workspace)
    except ConfigError as e:
        print_config_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)

    return workspace, config


def open_manifest(workspace: Workspace, config: RepoTreeConfig) -> Manifest:
    """Load the manifest document, exiting with USER_ERROR if it is unusable."""
    try:
        return load_manifest(workspace.manifest_file(config))
    except ManifestError as e:
        print_manifest_error(e)
        raise typer.Exit(ExitCode.USER_ERROR)
