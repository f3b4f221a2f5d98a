"""
Task record models.

Provides the Task and ParentTask snapshot records, the canonical metadata
enums and the derived Progress value.
"""

from .models import (
    WORKFLOW_DISPLAY_ORDER,
    ParentTask,
    Progress,
    Task,
    TaskPriority,
    TaskStatus,
    TaskStructure,
    TaskType,
    WorkflowState,
    task_from_record,
)

__all__ = [
    "ParentTask",
    "Progress",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TaskStructure",
    "TaskType",
    "WorkflowState",
    "WORKFLOW_DISPLAY_ORDER",
    "task_from_record",
]
