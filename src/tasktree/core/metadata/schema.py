"""
Built-in metadata schema.

Each field (status, priority, type, workflow state) is described by a list of
MetadataValue entries. The alias tables used for normalization are built from
this data, so supporting a new legacy format means adding an alias here or in
the ``metadata.aliases`` config section, never a new code branch.
"""

from pydantic import BaseModel, ConfigDict, Field

from tasktree.core.tasks.models import TaskPriority, TaskStatus, TaskType, WorkflowState

# Field names accepted by the normalizers
STATUS = "status"
PRIORITY = "priority"
TYPE = "type"
WORKFLOW_STATE = "workflow_state"

FIELDS: tuple[str, ...] = (STATUS, PRIORITY, TYPE, WORKFLOW_STATE)


class MetadataValue(BaseModel):
    """One canonical value with the spellings that map to it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Canonical name (e.g. 'in_progress')")
    label: str = Field(..., description="Display label (e.g. 'In Progress')")
    emoji: str | None = Field(default=None, description="Legacy emoji marker")
    aliases: tuple[str, ...] = Field(default=(), description="Extra accepted spellings")


STATUS_VALUES: tuple[MetadataValue, ...] = (
    MetadataValue(
        name=TaskStatus.TODO.value,
        label="To Do",
        emoji="🟡",
        aliases=("todo", "to-do", "new", "open", "pending", "planned", "not started"),
    ),
    MetadataValue(
        name=TaskStatus.IN_PROGRESS.value,
        label="In Progress",
        emoji="🔵",
        aliases=("in progress", "in-progress", "wip", "doing", "active", "started"),
    ),
    MetadataValue(
        name=TaskStatus.DONE.value,
        label="Done",
        emoji="🟢",
        aliases=("complete", "completed", "finished", "closed", "resolved"),
    ),
    MetadataValue(
        name=TaskStatus.BLOCKED.value,
        label="Blocked",
        emoji="🔴",
        aliases=("stuck", "waiting", "on hold", "on-hold"),
    ),
    MetadataValue(
        name=TaskStatus.ARCHIVED.value,
        label="Archived",
        emoji="⚪",
        aliases=("archive", "cancelled", "canceled", "wontfix", "won't fix"),
    ),
)

PRIORITY_VALUES: tuple[MetadataValue, ...] = (
    MetadataValue(
        name=TaskPriority.HIGHEST.value,
        label="Highest",
        emoji="🔥",
        aliases=("critical", "urgent", "blocker", "p0"),
    ),
    MetadataValue(
        name=TaskPriority.HIGH.value,
        label="High",
        emoji="🔼",
        aliases=("important", "p1"),
    ),
    MetadataValue(
        name=TaskPriority.MEDIUM.value,
        label="Medium",
        emoji="▶️",
        aliases=("normal", "default", "p2"),
    ),
    MetadataValue(
        name=TaskPriority.LOW.value,
        label="Low",
        emoji="🔽",
        aliases=("minor", "trivial", "p3"),
    ),
)

TYPE_VALUES: tuple[MetadataValue, ...] = (
    MetadataValue(name=TaskType.TASK.value, label="Task", emoji="📌", aliases=("todo item",)),
    MetadataValue(
        name=TaskType.FEATURE.value, label="Feature", emoji="🌟", aliases=("feat", "story")
    ),
    MetadataValue(
        name=TaskType.BUG.value, label="Bug", emoji="🐛", aliases=("bugfix", "fix", "defect")
    ),
    MetadataValue(
        name=TaskType.CHORE.value,
        label="Chore",
        emoji="🔧",
        aliases=("maintenance", "refactor", "cleanup"),
    ),
    MetadataValue(
        name=TaskType.DOCUMENTATION.value,
        label="Documentation",
        emoji="📚",
        aliases=("docs", "doc"),
    ),
    MetadataValue(
        name=TaskType.TEST.value, label="Test", emoji="🧪", aliases=("tests", "testing")
    ),
    MetadataValue(
        name=TaskType.SPIKE.value,
        label="Spike",
        emoji="💡",
        aliases=("research", "investigation", "poc"),
    ),
    MetadataValue(name=TaskType.IDEA.value, label="Idea", emoji="💭", aliases=("proposal",)),
)

WORKFLOW_STATE_VALUES: tuple[MetadataValue, ...] = (
    MetadataValue(
        name=WorkflowState.BACKLOG.value, label="Backlog", emoji="📋", aliases=("later",)
    ),
    MetadataValue(
        name=WorkflowState.CURRENT.value,
        label="Current",
        emoji="🚀",
        aliases=("active", "now", "working"),
    ),
    MetadataValue(
        name=WorkflowState.ARCHIVE.value,
        label="Archive",
        emoji="📦",
        aliases=("archived", "completed"),
    ),
)

SCHEMA: dict[str, tuple[MetadataValue, ...]] = {
    STATUS: STATUS_VALUES,
    PRIORITY: PRIORITY_VALUES,
    TYPE: TYPE_VALUES,
    WORKFLOW_STATE: WORKFLOW_STATE_VALUES,
}

DEFAULTS: dict[str, str] = {
    STATUS: TaskStatus.TODO.value,
    PRIORITY: TaskPriority.MEDIUM.value,
    TYPE: TaskType.CHORE.value,
    WORKFLOW_STATE: WorkflowState.BACKLOG.value,
}


def label_for(field: str, name: str) -> str:
    """
    Get the display label for a canonical name.

    Unknown names are returned unchanged, so UI-only tags pass through.
    """
    for value in SCHEMA.get(field, ()):
        if value.name == name:
            return value.label
    return name
