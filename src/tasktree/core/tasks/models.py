"""
Task data models for tasktree.

Defines the Task and ParentTask records supplied by the data source, the
canonical metadata enums, and the derived Progress value. Records are frozen
snapshots: the engine reads them and builds new views, it never mutates them.

Metadata fields (status, priority, type, workflow state) are kept as the raw
strings the data source provides. Legacy values such as "🟡 To Do" are common
in older task files, so normalization to the canonical enums happens in
tasktree.core.metadata, not at construction time.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class TaskStatus(str, Enum):
    """Canonical task status values."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"
    ARCHIVED = "archived"


class TaskPriority(str, Enum):
    """
    Canonical task priority levels.

    MEDIUM is the default and is suppressed in non-default summaries.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    HIGHEST = "highest"

    @property
    def order(self) -> int:
        """Get numeric value for sorting (higher = more important)."""
        return {
            TaskPriority.LOW: 1,
            TaskPriority.MEDIUM: 2,
            TaskPriority.HIGH: 3,
            TaskPriority.HIGHEST: 4,
        }[self]


class TaskType(str, Enum):
    """Canonical task type tags."""

    TASK = "task"
    FEATURE = "feature"
    BUG = "bug"
    CHORE = "chore"
    DOCUMENTATION = "documentation"
    TEST = "test"
    SPIKE = "spike"
    IDEA = "idea"


class WorkflowState(str, Enum):
    """Top-level lifecycle bucket. Partitions are mutually exclusive."""

    BACKLOG = "backlog"
    CURRENT = "current"
    ARCHIVE = "archive"


# Fixed display precedence for workflow sections
WORKFLOW_DISPLAY_ORDER: tuple[WorkflowState, ...] = (
    WorkflowState.CURRENT,
    WorkflowState.BACKLOG,
    WorkflowState.ARCHIVE,
)


class TaskStructure(str, Enum):
    """Position of a task in the two-level hierarchy."""

    SIMPLE = "simple"
    PARENT = "parent"
    SUBTASK = "subtask"


class Progress(BaseModel):
    """
    Rolled-up completion of a parent's subtasks.

    Always derived from the subtask snapshot. A copy stored on a ParentTask
    is only a cache and may be stale.
    """

    model_config = ConfigDict(frozen=True)

    completed: int = Field(default=0, ge=0, description="Subtasks whose status is done")
    total: int = Field(default=0, ge=0, description="Number of subtasks")
    percentage: int = Field(default=0, ge=0, le=100, description="Rounded half-up 0-100")

    @computed_field
    @property
    def remaining(self) -> int:
        """Number of subtasks not yet done."""
        return self.total - self.completed


class Task(BaseModel):
    """
    A task record as supplied by the data source.

    Example:
        >>> task = Task(
        ...     id="add-login-form-05A",
        ...     title="Add login form",
        ...     status="🟡 To Do",
        ...     workflowState="current",
        ... )
        >>> task.is_subtask
        False
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,  # Allow both 'parent_id' and 'parentId'
    )

    # Required fields
    id: str = Field(..., min_length=1, description="Unique task identifier")
    title: str = Field(default="", description="Task title")

    # Metadata as supplied (canonical or legacy strings)
    type: str = Field(default="", description="Task type tag")
    status: str = Field(default="", description="Task status")
    priority: str = Field(default="", description="Task priority")
    workflow_state: str = Field(
        default="backlog", alias="workflowState", description="backlog, current or archive"
    )

    # Hierarchy
    task_structure: TaskStructure = Field(
        default=TaskStructure.SIMPLE, alias="taskStructure", description="simple, parent or subtask"
    )
    parent_id: str | None = Field(
        default=None, alias="parentId", description="Parent task ID (subtasks only)"
    )
    sequence: str | None = Field(
        default=None, description="Sequence code within the parent (e.g. '04a')"
    )

    # Optional metadata
    tags: tuple[str, ...] = Field(default=(), description="Task tags")
    assignee: str | None = Field(default=None, description="Assigned person")
    area: str | None = Field(default=None, description="Project area")

    # Timestamps
    created_date: date | datetime | None = Field(default=None, alias="createdDate")
    updated_date: date | datetime | None = Field(default=None, alias="updatedDate")
    archived_date: date | datetime | None = Field(default=None, alias="archivedDate")

    # Section name -> markdown text (instruction, tasks, deliverable, log)
    content: dict[str, str] = Field(default_factory=dict)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v: Any) -> Any:
        """Accept a single comma-separated string as well as a list."""
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(tag.strip() for tag in v.split(",") if tag.strip())
        return v

    @field_validator("sequence", mode="before")
    @classmethod
    def validate_sequence(cls, v: Any) -> Any:
        """Coerce numeric sequence values and treat blanks as absent."""
        if v is None:
            return None
        if isinstance(v, int):
            return f"{v:02d}"
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @property
    def is_parent(self) -> bool:
        """Whether this task is a parent container."""
        return self.task_structure == TaskStructure.PARENT

    @property
    def is_subtask(self) -> bool:
        """Whether this task references a parent."""
        return self.parent_id is not None and not self.is_parent


class ParentTask(Task):
    """
    A task that contains ordered, possibly parallel subtasks.

    ``progress`` is whatever the data source had stored and is never
    authoritative; use tasktree.core.progress to derive the live value.
    """

    task_structure: TaskStructure = Field(default=TaskStructure.PARENT, alias="taskStructure")
    subtask_ids: tuple[str, ...] = Field(
        default=(), alias="subtaskIds", description="Ordered list of child task IDs"
    )
    progress: Progress | None = Field(default=None, description="Stored progress (cache hint)")


def task_from_record(record: dict[str, Any]) -> Task:
    """
    Build a Task or ParentTask from a plain record.

    Records whose taskStructure is "parent" become ParentTask instances.

    Raises:
        pydantic.ValidationError: If the record is malformed
    """
    structure = record.get("taskStructure", record.get("task_structure"))
    if structure == TaskStructure.PARENT.value:
        return ParentTask.model_validate(record)
    return Task.model_validate(record)
