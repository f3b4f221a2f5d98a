"""
Task hierarchy resolution.

Partitions a workflow state's tasks into parents, standalone tasks and
subtasks, linking them by ID through a flat TaskIndex.
"""

from .resolver import (
    Partition,
    TaskIndex,
    build_partition,
    group_by_workflow_state,
    visible_sections,
)

__all__ = [
    "Partition",
    "TaskIndex",
    "build_partition",
    "group_by_workflow_state",
    "visible_sections",
]
