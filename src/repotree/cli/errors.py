"""
Standardized error handling and exit codes for the repotree CLI.

This module provides consistent error messaging with actionable guidance
and standardized exit codes across all CLI commands.
"""

from enum import IntEnum

from rich.console import Console
from rich.markup import escape

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for repotree CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """A sync run failed or git reported an error."""

    USER_ERROR = 2
    """User configuration or input error (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Not in a repotree workspace",
        ...     solution="repotree init -u <manifest-url>",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def print_not_workspace_error() -> None:
    """Print error when no workspace encloses the current directory."""
    print_error(
        "Not in a repotree workspace",
        reason="Could not find a .repotree/ directory here or in any parent",
        solution="repotree init -u <manifest-url>  # or cd to your workspace",
    )


def print_config_error(error: Exception) -> None:
    """Print error when the workspace configuration cannot be used."""
    print_error(
        "Workspace configuration is not usable",
        reason=str(error),
        solution="repotree init -u <manifest-url> --force-delete  # to recreate it",
    )


def print_manifest_error(error: Exception) -> None:
    """Print error when the manifest cannot be read."""
    print_error(
        "Manifest cannot be loaded",
        reason=str(error),
        solution="Check the manifest file and branch given to repotree init",
    )


def print_git_error(problem: str, error: Exception) -> None:
    """Print error for a failed git step, including git's own output."""
    stderr = getattr(error, "stderr", "")
    print_error(problem, reason=stderr or str(error))


__all__ = [
    "ExitCode",
    "print_error",
    "print_config_error",
    "print_git_error",
    "print_manifest_error",
    "print_not_workspace_error",
]
