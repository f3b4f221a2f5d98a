"""
Exit codes and error output for tasktree commands.

Problems go to stderr so that ``--json`` output on stdout stays parseable.
"""

from enum import IntEnum

from rich.console import Console

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Process exit status of a tasktree command."""

    SUCCESS = 0

    GENERAL_ERROR = 1
    """The snapshot loaded but `tasktree check` found warnings in it."""

    USER_ERROR = 2
    """Bad input: unreadable snapshot, invalid config, unknown field or value."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Report a failed command on stderr.

    *reason* is shown dimmed under the problem, *solution* as a hint line.
    """
    console.print(f"[red]Error:[/red] {problem}", highlight=False)
    if reason:
        console.print(f"[dim]{reason}[/dim]", highlight=False)
    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}", highlight=False)
