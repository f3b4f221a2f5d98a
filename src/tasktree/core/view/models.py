"""
Renderer-agnostic view tree models.

A TaskView is what every front end consumes: ordered sections, each with an
ordered list of nodes. Nodes carry canonical display values and positional
hints (``is_last``) but never glyphs, colors or markup; turning them into a
tree drawing, table row or card is the renderer's job.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, computed_field

from tasktree.core.errors import TaskWarning
from tasktree.core.progress.aggregator import StatusCounts
from tasktree.core.tasks.models import Progress, TaskPriority, TaskStatus, WorkflowState


class NodeKind(str, Enum):
    """Role of a node in the view tree."""

    PARENT = "parent"
    STANDALONE = "standalone"
    SUBTASK = "subtask"
    PARALLEL_GROUP = "parallel-group"


class ViewNode(BaseModel):
    """
    One node of the view tree.

    Task nodes (parent, standalone, subtask) carry the task's canonical
    display fields. Parallel-group nodes carry only the shared ``step`` and
    their member subtasks as children.
    """

    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    task_id: str | None = Field(default=None, description="None for parallel groups")
    title: str = ""

    # Canonical display values
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    type: str | None = Field(default=None, description="Canonical type or UI-only tag")
    workflow_state: WorkflowState | None = None
    assignee: str | None = None
    area: str | None = None
    tags: tuple[str, ...] = ()

    # Hierarchy
    parent_id: str | None = None
    sequence: str | None = None
    step: str | None = Field(default=None, description="Sequence step of subtasks and groups")
    progress: Progress | None = Field(default=None, description="Derived progress (parents)")
    is_orphaned: bool = Field(default=False, description="Subtask whose parent is absent")
    is_ambiguous: bool = Field(
        default=False, description="Parallel group whose members share an identical code"
    )

    # Positional hint for tree renderers
    is_last: bool = False

    children: tuple[ViewNode, ...] = ()

    @computed_field
    @property
    def priority_marker(self) -> TaskPriority | None:
        """Priority to show in summaries, None for the default (medium)."""
        if self.priority is None or self.priority == TaskPriority.MEDIUM:
            return None
        return self.priority

    @property
    def is_task(self) -> bool:
        return self.kind != NodeKind.PARALLEL_GROUP

    def iter_nodes(self) -> Iterator[ViewNode]:
        """Depth-first traversal starting at this node."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()


class SectionView(BaseModel):
    """All nodes of one workflow state, in display order."""

    model_config = ConfigDict(frozen=True)

    workflow_state: WorkflowState
    nodes: tuple[ViewNode, ...] = ()
    counts: StatusCounts = Field(default_factory=StatusCounts)
    warnings: tuple[SerializeAsAny[TaskWarning], ...] = ()

    def iter_nodes(self) -> Iterator[ViewNode]:
        for node in self.nodes:
            yield from node.iter_nodes()


class TaskView(BaseModel):
    """Projected view of a whole snapshot."""

    model_config = ConfigDict(frozen=True)

    sections: tuple[SectionView, ...] = ()
    warnings: tuple[SerializeAsAny[TaskWarning], ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.sections

    def section(self, state: WorkflowState) -> SectionView | None:
        for section in self.sections:
            if section.workflow_state == state:
                return section
        return None

    def iter_nodes(self) -> Iterator[ViewNode]:
        """Depth-first traversal of every node in every section."""
        for section in self.sections:
            yield from section.iter_nodes()

    def find(self, task_id: str) -> ViewNode | None:
        for node in self.iter_nodes():
            if node.task_id == task_id:
                return node
        return None

    def non_default_priority_nodes(self) -> list[ViewNode]:
        """Task nodes whose priority is shown in summaries (anything but medium)."""
        return [node for node in self.iter_nodes() if node.priority_marker is not None]
