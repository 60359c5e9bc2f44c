"""
Repotree CLI - Status command.
"""

import logging
from pathlib import PurePath

from rich.console import Console
from rich.markup import escape

from repotree.cli.common import open_manifest, open_workspace
from repotree.core.errors import GitError
from repotree.core.report import WorkspaceReport

console = Console()
logger = logging.getLogger(__name__)


def status() -> None:
    """
    Show the working tree status of every project.

    Each changed file is listed with a two-letter code: the staged state
    followed by the unstaged state, `-` meaning unmodified.
    """
    workspace, config = open_workspace()
    manifest = open_manifest(workspace, config)
    report = WorkspaceReport(workspace, manifest)

    for project in manifest.projects:
        try:
            entries = report.status(project)
        except GitError as e:
            logger.error("Fail to list status of %s: %s", project.path, e)
            continue

        console.print(f"=== Status of {escape(PurePath(project.path).name)}", highlight=False)
        for entry in entries:
            console.print(f"  {entry.indicator}  {escape(entry.path)}", highlight=False)
