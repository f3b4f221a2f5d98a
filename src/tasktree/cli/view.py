"""
Tasktree CLI - view, check and progress commands.

A thin renderer over the projected view tree: the core decides grouping,
ordering and progress, this module only turns nodes into rich output.
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from tasktree.cli.errors import ExitCode, print_error
from tasktree.cli.snapshot import SnapshotError, load_snapshot
from tasktree.core.config import load_config
from tasktree.core.errors import UnrecognizedValueError
from tasktree.core.hierarchy import TaskIndex
from tasktree.core.metadata import PRIORITY, STATUS, label_for
from tasktree.core.progress import ProgressResolution
from tasktree.core.tasks.models import ParentTask, Progress, Task
from tasktree.core.view import NodeKind, TaskView, ViewNode, ViewProjector

console = Console()

STATUS_STYLES = {
    "done": "green",
    "in_progress": "cyan",
    "blocked": "red",
    "todo": "default",
    "archived": "dim",
}


def _get_projector() -> ViewProjector:
    """Projector configured from .tasktree.json / user config / env."""
    try:
        config = load_config()
    except (ValidationError, ValueError) as e:
        print_error("Invalid tasktree configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR) from e
    try:
        return ViewProjector.from_config(config)
    except ValueError as e:
        print_error("Invalid metadata aliases in configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR) from e


def _load(path: Path) -> list[Task]:
    try:
        return load_snapshot(path)
    except SnapshotError as e:
        print_error(
            f"Cannot load snapshot {e.path}",
            reason=e.reason,
            solution="export tasks as a JSON list of records",
        )
        raise typer.Exit(ExitCode.USER_ERROR) from e


def _node_label(node: ViewNode) -> str:
    """Format a node's line for the tree."""
    if node.kind == NodeKind.PARALLEL_GROUP:
        label = f"[bold]Parallel execution - {node.step}[/bold]"
        if node.is_ambiguous:
            label += " [yellow](duplicate sequence)[/yellow]"
        return label

    status = node.status.value if node.status else "todo"
    style = STATUS_STYLES.get(status, "default")
    task_id = escape(node.task_id or "")
    title = escape(node.title) or task_id
    parts = [f"[{style}]{title}[/{style}] [dim]\\[{task_id}][/dim]"]
    parts.append(label_for(STATUS, status))
    if node.kind == NodeKind.PARENT and node.progress and node.progress.total:
        parts.append(f"{node.progress.completed}/{node.progress.total} done")
    if node.priority_marker:
        parts.append(label_for(PRIORITY, node.priority_marker.value))
    if node.assignee:
        parts.append(escape(f"@{node.assignee}"))
    if node.tags:
        parts.append(escape(" ".join(f"#{tag}" for tag in node.tags)))
    line = " • ".join(parts)
    if node.is_orphaned:
        line += " [yellow](no parent)[/yellow]"
    return line


def _add_nodes(tree: Tree, nodes: tuple[ViewNode, ...]) -> None:
    for node in nodes:
        branch = tree.add(_node_label(node))
        _add_nodes(branch, node.children)


def render_tree(view: TaskView) -> None:
    """Print each section as a rich tree."""
    for section in view.sections:
        tree = Tree(f"[bold]{section.workflow_state.value.upper()}[/bold]")
        _add_nodes(tree, section.nodes)
        console.print(tree)
        console.print()


def view(
    snapshot: Path = typer.Argument(..., help="JSON file of task records"),
    json_output: bool = typer.Option(False, "--json", help="Output the view tree as JSON"),
) -> None:
    """
    Show tasks grouped by workflow state, parent and sequence.

    Examples:
        tasktree view tasks.json
        tasktree view tasks.json --json
    """
    projector = _get_projector()
    tasks = _load(snapshot)
    task_view = projector.project(tasks)

    if json_output:
        typer.echo(task_view.model_dump_json(indent=2))
        return

    if task_view.is_empty:
        console.print("[dim]No tasks found.[/dim]")
        return

    render_tree(task_view)
    if task_view.warnings:
        console.print(
            f"[yellow]{len(task_view.warnings)} warning(s).[/yellow] "
            f"Run [cyan]tasktree check {snapshot}[/cyan] for details."
        )


def check(
    snapshot: Path = typer.Argument(..., help="JSON file of task records"),
) -> None:
    """
    List data problems: repeated task IDs, orphaned subtasks, duplicate
    sequence codes and unrecognized metadata values.

    Exits with status 1 when any problem is found.
    """
    projector = _get_projector()
    tasks = _load(snapshot)
    task_view = projector.project(tasks)

    if not task_view.warnings:
        console.print(f"[green]No problems found in {len(tasks)} task(s).[/green]")
        return

    table = Table(title="Task data warnings")
    table.add_column("Kind", style="yellow")
    table.add_column("Tasks", style="cyan")
    table.add_column("Message")
    for warning in task_view.warnings:
        table.add_row(
            warning.kind.value, escape(", ".join(warning.task_ids)), escape(warning.message)
        )
    console.print(table)
    raise typer.Exit(ExitCode.GENERAL_ERROR)


def progress(
    snapshot: Path = typer.Argument(..., help="JSON file of task records"),
    parent_id: str = typer.Argument(..., help="ID of the parent task"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Show a parent's progress, recomputed from its subtasks.

    Counts the same subtasks `tasktree view` nests under the parent, and
    flags a stored progress value that no longer matches.
    """
    projector = _get_projector()
    tasks = _load(snapshot)
    index = TaskIndex(tasks)

    parent = index.get(parent_id)
    if parent is None or not parent.is_parent:
        print_error(
            f"Parent task not found: {parent_id}",
            solution=f"tasktree view {snapshot}",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    node = projector.project(tasks).find(parent_id)
    result = node.progress if node is not None and node.progress is not None else Progress()
    resolution = ProgressResolution(
        progress=result, stored=parent.progress if isinstance(parent, ParentTask) else None
    )

    if json_output:
        typer.echo(result.model_dump_json(indent=2))
        return

    console.print(
        f"[bold]{escape(parent.title or parent_id)}[/bold]: "
        f"{result.completed}/{result.total} done ({result.percentage}%)"
    )
    if resolution.is_stale and resolution.stored is not None:
        console.print(
            f"[yellow]Stored progress is stale[/yellow] "
            f"({resolution.stored.completed}/{resolution.stored.total})"
        )


def normalize(
    field: str = typer.Argument(..., help="status, priority, type or workflow_state"),
    value: str = typer.Argument(..., help="Raw value to normalize"),
    strict: bool = typer.Option(False, "--strict", help="Fail on unrecognized values"),
) -> None:
    """
    Show the canonical form of a metadata value.

    Examples:
        tasktree normalize status "🟡 To Do"
        tasktree normalize priority urgent --strict
    """
    normalizer = _get_projector().normalizer
    try:
        if strict:
            console.print(normalizer.normalize_strict(field, value), highlight=False)
            return
        result = normalizer.resolve(field, value)
    except UnrecognizedValueError as e:
        print_error(str(e))
        raise typer.Exit(ExitCode.USER_ERROR) from e
    except ValueError as e:
        print_error(str(e), solution="use one of: status, priority, type, workflow_state")
        raise typer.Exit(ExitCode.USER_ERROR) from e

    console.print(result.value, highlight=False)
    if result.was_unrecognized:
        console.print(f"[yellow]Unrecognized {field} {value!r}[/yellow]", highlight=False)
