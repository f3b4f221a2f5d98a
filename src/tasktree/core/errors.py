"""
Errors and non-fatal warnings raised by the tasktree engine.

Only strict normalization raises. Everything else degrades to defaults and
attaches a warning record to its output so data problems stay visible
without aborting a projection.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class UnrecognizedValueError(ValueError):
    """A metadata value matched no canonical name or alias."""

    def __init__(self, field: str, value: str | None, valid_options: list[str]) -> None:
        self.field = field
        self.value = value
        self.valid_options = valid_options
        super().__init__(
            f"Invalid {field} {value!r}. Valid options are: {', '.join(valid_options)}"
        )


class WarningKind(str, Enum):
    """Categories of non-fatal data problems."""

    ORPHANED_SUBTASK = "orphaned_subtask"
    INCONSISTENT_SEQUENCE = "inconsistent_sequence"
    UNRECOGNIZED_VALUE = "unrecognized_value"
    DUPLICATE_TASK_ID = "duplicate_task_id"


class TaskWarning(BaseModel):
    """A non-fatal data problem attached to engine output."""

    model_config = ConfigDict(frozen=True)

    kind: WarningKind
    message: str
    task_ids: tuple[str, ...] = Field(default=(), description="Tasks the warning is about")


class OrphanedSubtaskWarning(TaskWarning):
    """
    A subtask whose parent is absent from its partition.

    The subtask is still rendered, in the standalone section, with an
    explicit orphan marker.
    """

    kind: Literal[WarningKind.ORPHANED_SUBTASK] = WarningKind.ORPHANED_SUBTASK
    parent_id: str
    parent_workflow_state: str | None = Field(
        default=None, description="Where the parent lives, if elsewhere in the snapshot"
    )


class InconsistentSequenceWarning(TaskWarning):
    """Sibling subtasks share an identical sequence code."""

    kind: Literal[WarningKind.INCONSISTENT_SEQUENCE] = WarningKind.INCONSISTENT_SEQUENCE
    parent_id: str | None = None
    sequence: str


class UnrecognizedValueWarning(TaskWarning):
    """A metadata value fell back to its default during safe normalization."""

    kind: Literal[WarningKind.UNRECOGNIZED_VALUE] = WarningKind.UNRECOGNIZED_VALUE
    field: str
    value: str


class DuplicateTaskIdWarning(TaskWarning):
    """
    Several records share one task ID.

    The first record is used; later ones are left out of the view.
    """

    kind: Literal[WarningKind.DUPLICATE_TASK_ID] = WarningKind.DUPLICATE_TASK_ID
    dropped: int = Field(default=1, ge=1, description="Records ignored after the first")
