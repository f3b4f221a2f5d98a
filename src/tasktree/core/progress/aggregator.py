"""
Progress aggregation over subtask snapshots.

Parent progress is always derived from the live subtasks at read time. A
``progress`` value stored on a ParentTask is treated as a cache hint only:
resolve_progress() recomputes it and reports whether the hint was stale.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from pydantic import BaseModel, Field, computed_field

from tasktree.core.metadata.normalizer import MetadataNormalizer, get_default_normalizer
from tasktree.core.metadata.schema import STATUS
from tasktree.core.tasks.models import ParentTask, Progress, Task, TaskStatus

logger = logging.getLogger(__name__)


def percentage(completed: int, total: int) -> int:
    """
    Completion percentage rounded half up, 0 when total is 0.

    Integer arithmetic keeps 1/8 -> 13 and 1/200 -> 1 exact.
    """
    if total <= 0:
        return 0
    completed = max(0, min(completed, total))
    return (200 * completed + total) // (2 * total)


def compute_progress(
    subtasks: Iterable[Task], normalizer: MetadataNormalizer | None = None
) -> Progress:
    """
    Derive completed/total/percentage for a set of subtasks.

    A subtask counts as completed when its status, in any spelling,
    normalizes to done.

    Example:
        >>> compute_progress([done_task, todo_task, todo_task, todo_task])
        Progress(completed=1, total=4, percentage=25)
    """
    normalizer = normalizer or get_default_normalizer()
    total = 0
    completed = 0
    for task in subtasks:
        total += 1
        if normalizer.resolve(STATUS, task.status).value == TaskStatus.DONE.value:
            completed += 1
    return Progress(completed=completed, total=total, percentage=percentage(completed, total))


class StatusCounts(BaseModel):
    """
    Task count statistics by canonical status.

    Used by renderers that show a status breakdown next to progress.
    """

    total: int = Field(default=0, description="Total number of tasks")
    todo: int = Field(default=0, description="Number of to-do tasks")
    in_progress: int = Field(default=0, description="Number of in-progress tasks")
    done: int = Field(default=0, description="Number of done tasks")
    blocked: int = Field(default=0, description="Number of blocked tasks")
    archived: int = Field(default=0, description="Number of archived tasks")

    @computed_field
    @property
    def remaining(self) -> int:
        """Number of tasks not done."""
        return self.total - self.done

    @computed_field
    @property
    def completion_percentage(self) -> int:
        """Percentage of tasks done (0-100)."""
        return percentage(self.done, self.total)


def count_statuses(
    tasks: Iterable[Task], normalizer: MetadataNormalizer | None = None
) -> StatusCounts:
    """Count tasks per canonical status (unknown statuses count as todo)."""
    normalizer = normalizer or get_default_normalizer()
    counts = {status.value: 0 for status in TaskStatus}
    total = 0
    for task in tasks:
        total += 1
        counts[normalizer.resolve(STATUS, task.status).value] += 1
    return StatusCounts(total=total, **counts)


@dataclass(frozen=True)
class ProgressResolution:
    """Live progress of a parent plus what the data source had stored."""

    progress: Progress
    stored: Progress | None = None

    @property
    def is_stale(self) -> bool:
        """Whether a stored value exists and disagrees with the live one."""
        return self.stored is not None and self.stored != self.progress


def resolve_progress(
    parent: Task,
    subtasks: Iterable[Task],
    normalizer: MetadataNormalizer | None = None,
) -> ProgressResolution:
    """
    Recompute a parent's progress from its live subtasks.

    The stored ``progress`` field on a ParentTask is never returned as the
    result; it is only compared so callers can surface stale caches.
    """
    progress = compute_progress(subtasks, normalizer)
    stored = parent.progress if isinstance(parent, ParentTask) else None
    resolution = ProgressResolution(progress=progress, stored=stored)
    if resolution.is_stale:
        logger.debug(
            f"Stored progress for {parent.id} is stale "
            f"({stored.completed}/{stored.total} vs {progress.completed}/{progress.total})"
        )
    return resolution
