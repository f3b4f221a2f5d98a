"""
Tasktree - task hierarchy and sequencing engine.

Turns flat snapshots of task records into the derived views every front end
needs: normalized metadata, grouped subtask sequences, rolled-up progress and
an ordered, renderer-agnostic node tree.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from tasktree.core.tasks.models import ParentTask, Progress, Task, TaskPriority, TaskStatus
from tasktree.core.view import TaskView, project_view

__all__ = [
    "ParentTask",
    "Progress",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TaskView",
    "project_view",
    "__version__",
]
