"""
Hierarchy resolution for one snapshot of tasks.

Tasks are stored flat and keyed by ID (TaskIndex). Parent/subtask links are
resolved by ID lookup when a view is built, never held as object references,
so an edit to one record can never leave another pointing at a stale copy.

build_partition() splits the tasks of one workflow state into parents,
standalone tasks and subtasks. It never drops a task: a subtask whose parent
is not a parent task in the same partition is *orphaned*, kept in the
standalone section and flagged with an OrphanedSubtaskWarning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence

from pydantic import BaseModel, ConfigDict, Field

from tasktree.core.errors import DuplicateTaskIdWarning, OrphanedSubtaskWarning
from tasktree.core.metadata.normalizer import MetadataNormalizer, get_default_normalizer
from tasktree.core.metadata.schema import WORKFLOW_STATE
from tasktree.core.tasks.models import WORKFLOW_DISPLAY_ORDER, Task, WorkflowState

logger = logging.getLogger(__name__)


class TaskIndex:
    """
    Flat, ID-keyed arena over a task snapshot.

    Example::

        index = TaskIndex(tasks)
        index.children_of("build-auth-05A")   # subtasks in input order
        index.parent_of("02_add-form-05B")    # parent record or None
    """

    __slots__ = ("_tasks", "_children", "_dropped")

    def __init__(self, tasks: Iterable[Task]) -> None:
        self._tasks: dict[str, Task] = {}
        # children[P] = [A, B] means A and B declare P as their parent
        self._children: dict[str, list[str]] = {}
        # Records skipped because an earlier one had the same ID
        self._dropped: dict[str, int] = {}

        for task in tasks:
            if task.id in self._tasks:
                logger.warning(f"Duplicate task ID {task.id!r}, keeping the first record")
                self._dropped[task.id] = self._dropped.get(task.id, 0) + 1
                continue
            self._tasks[task.id] = task
            if task.is_subtask and task.parent_id is not None:
                self._children.setdefault(task.parent_id, []).append(task.id)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def duplicate_warnings(self) -> list[DuplicateTaskIdWarning]:
        """One warning per task ID that appeared more than once."""
        return [
            DuplicateTaskIdWarning(
                message=f"Task ID {task_id} is used by {count + 1} records, using the first",
                task_ids=(task_id,),
                dropped=count,
            )
            for task_id, count in self._dropped.items()
        ]

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def children_of(self, parent_id: str) -> list[Task]:
        """Subtasks declaring *parent_id* as their parent, in input order."""
        return [self._tasks[child_id] for child_id in self._children.get(parent_id, [])]

    def parent_of(self, task_id: str) -> Task | None:
        """The parent task of a subtask, if it is present and is a parent."""
        task = self._tasks.get(task_id)
        if task is None or not task.is_subtask or task.parent_id is None:
            return None
        parent = self._tasks.get(task.parent_id)
        if parent is None or not parent.is_parent:
            return None
        return parent


class Partition(BaseModel):
    """
    The tasks of one workflow state split by hierarchy role.

    ``subtasks`` holds every task with a parent reference, orphans included,
    so parents + standalone + subtasks always equals the input count.
    ``standalone_section`` is what renders at top level after the parents:
    standalone tasks and orphaned subtasks, in input order.
    """

    model_config = ConfigDict(frozen=True)

    workflow_state: WorkflowState | None = None
    parent_tasks: tuple[Task, ...] = Field(default=())
    standalone_tasks: tuple[Task, ...] = Field(default=())
    subtasks: tuple[Task, ...] = Field(default=())
    subtasks_by_parent: dict[str, tuple[Task, ...]] = Field(default_factory=dict)
    orphaned_subtasks: tuple[Task, ...] = Field(default=())
    standalone_section: tuple[Task, ...] = Field(default=())
    warnings: tuple[OrphanedSubtaskWarning, ...] = Field(default=())

    @property
    def total(self) -> int:
        return len(self.parent_tasks) + len(self.standalone_tasks) + len(self.subtasks)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @property
    def orphan_ids(self) -> frozenset[str]:
        return frozenset(t.id for t in self.orphaned_subtasks)

    def subtasks_of(self, parent_id: str) -> tuple[Task, ...]:
        return self.subtasks_by_parent.get(parent_id, ())


def build_partition(
    tasks: Sequence[Task],
    *,
    workflow_state: WorkflowState | None = None,
    snapshot: TaskIndex | None = None,
    normalizer: MetadataNormalizer | None = None,
) -> Partition:
    """
    Split one workflow state's tasks into parents, standalone and subtasks.

    Args:
        tasks: Tasks of a single workflow state, in display order
        workflow_state: The state these tasks belong to (informational)
        snapshot: Index over the whole snapshot, used to report where an
            orphan's parent lives when it is in another workflow state
        normalizer: Normalizer for the parent's workflow state in warnings

    Returns:
        Partition with a parentId -> subtasks index built in one pass
    """
    parents: list[Task] = []
    standalone: list[Task] = []
    subtasks: list[Task] = []

    for task in tasks:
        if task.is_parent:
            parents.append(task)
        elif task.is_subtask:
            subtasks.append(task)
        else:
            standalone.append(task)

    parent_ids = {p.id for p in parents}
    by_parent: dict[str, list[Task]] = {}
    orphans: list[Task] = []
    warnings: list[OrphanedSubtaskWarning] = []

    for task in subtasks:
        parent_id = task.parent_id or ""
        if parent_id in parent_ids:
            by_parent.setdefault(parent_id, []).append(task)
            continue
        orphans.append(task)
        warnings.append(_orphan_warning(task, parent_id, snapshot, normalizer))

    # Everything not nested under a parent of this partition, in input order
    section = tuple(
        t for t in tasks if not t.is_parent and not (t.is_subtask and t.parent_id in parent_ids)
    )

    return Partition(
        workflow_state=workflow_state,
        parent_tasks=tuple(parents),
        standalone_tasks=tuple(standalone),
        subtasks=tuple(subtasks),
        subtasks_by_parent={pid: tuple(children) for pid, children in by_parent.items()},
        orphaned_subtasks=tuple(orphans),
        standalone_section=section,
        warnings=tuple(warnings),
    )


def _orphan_warning(
    task: Task,
    parent_id: str,
    snapshot: TaskIndex | None,
    normalizer: MetadataNormalizer | None,
) -> OrphanedSubtaskWarning:
    parent = snapshot.get(parent_id) if snapshot is not None else None
    parent_state: str | None = None

    if parent is None:
        message = f"Subtask {task.id} references missing parent {parent_id}"
    elif not parent.is_parent:
        message = f"Subtask {task.id} references {parent_id}, which is not a parent task"
    else:
        normalizer = normalizer or get_default_normalizer()
        parent_state = normalizer.resolve(WORKFLOW_STATE, parent.workflow_state).value
        message = f"Subtask {task.id} is separated from parent {parent_id} ({parent_state})"

    logger.warning(message)
    return OrphanedSubtaskWarning(
        message=message,
        task_ids=(task.id,),
        parent_id=parent_id,
        parent_workflow_state=parent_state,
    )


def group_by_workflow_state(
    tasks: Iterable[Task], normalizer: MetadataNormalizer | None = None
) -> dict[WorkflowState, list[Task]]:
    """
    Bucket tasks by normalized workflow state, preserving input order.

    Keys follow the display precedence current, backlog, archive. Each task
    lands in exactly one bucket.
    """
    normalizer = normalizer or get_default_normalizer()
    buckets: dict[WorkflowState, list[Task]] = {state: [] for state in WORKFLOW_DISPLAY_ORDER}
    for task in tasks:
        state = WorkflowState(normalizer.resolve(WORKFLOW_STATE, task.workflow_state).value)
        buckets[state].append(task)
    return buckets


def visible_sections(
    tasks: Iterable[Task], normalizer: MetadataNormalizer | None = None
) -> list[WorkflowState]:
    """Workflow states with at least one task, in display precedence."""
    buckets = group_by_workflow_state(tasks, normalizer)
    return [state for state in WORKFLOW_DISPLAY_ORDER if buckets[state]]
