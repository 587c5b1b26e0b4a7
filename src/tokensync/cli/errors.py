"""
Standardized error handling and exit codes for the tokensync CLI.

This module provides consistent error messaging with actionable guidance
and maps result statuses onto exit codes.
"""

from enum import IntEnum

from rich.console import Console

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for tokensync CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Remote, network or unexpected error."""

    USER_ERROR = 2
    """Invalid input or target (actionable by user)."""

    NOT_MODIFIED = 3
    """Nothing to commit; the repository already matches."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


_USER_ERROR_STATUSES = {400, 404, 409, 412}


def exit_code_for_status(ok: bool, status: int | None) -> ExitCode:
    """
    Map a result's ``ok``/``status`` onto an exit code.

    Example:
        >>> exit_code_for_status(False, 304)
        <ExitCode.NOT_MODIFIED: 3>
    """
    if ok:
        return ExitCode.SUCCESS
    if status == 304:
        return ExitCode.NOT_MODIFIED
    if status in _USER_ERROR_STATUSES:
        return ExitCode.USER_ERROR
    return ExitCode.GENERAL_ERROR


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
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_not_authenticated_error() -> None:
    """Print error when no GitHub token is available."""
    print_error(
        "Not authenticated with GitHub",
        reason="No --token given, no TOKENSYNC_GITHUB_TOKEN/GITHUB_TOKEN set, "
        "and no remembered token",
        solution="tokensync auth login --remember",
    )


def print_missing_target_error(missing: str) -> None:
    """Print error when the repository target is incomplete."""
    print_error(
        f"No {missing} selected",
        reason="The target is taken from options or the remembered selection",
        solution=f"pass --{missing} or run `tokensync repos select OWNER/REPO`",
    )


def print_result_failure(status: int | None, message: str | None) -> None:
    """Print a failed service result."""
    if status == 304:
        console.print(f"[blue]No changes:[/blue] {message}")
        return
    label = f"({status}) " if status else ""
    print_error(f"{label}{message or 'Request failed'}")
