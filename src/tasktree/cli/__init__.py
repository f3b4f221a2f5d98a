"""
Tasktree CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from tasktree import __version__
from tasktree.cli import view

# Help panel names for command grouping
PANEL_VIEW = "View Tasks"
PANEL_DATA = "Check Task Data"

app = typer.Typer(
    name="tasktree",
    help="Task hierarchy and sequencing views for task snapshots",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def configure_logging(debug: bool) -> None:
    """
    Configure logging for CLI commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"tasktree version {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show tasktree version and exit",
    ),
) -> None:
    """
    Tasktree - task hierarchy and sequencing views.

    Reads a JSON snapshot of task records and shows them grouped by workflow
    state, parent task and sequence, with progress recomputed from subtasks.

    Quick Start:
        tasktree view tasks.json          # Tree of current/backlog/archive
        tasktree check tasks.json         # Orphans, duplicate sequences, bad values
        tasktree progress tasks.json P1   # Progress of one parent
    """
    configure_logging(debug)
    ctx.obj = {"debug": debug}


app.command(name="view", rich_help_panel=PANEL_VIEW)(view.view)
app.command(name="progress", rich_help_panel=PANEL_VIEW)(view.progress)
app.command(name="check", rich_help_panel=PANEL_DATA)(view.check)
app.command(name="normalize", rich_help_panel=PANEL_DATA)(view.normalize)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
