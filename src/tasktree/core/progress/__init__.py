"""
Progress aggregation.

Derives completed/total/percentage for subtask sets and status breakdowns.
"""

from .aggregator import (
    ProgressResolution,
    StatusCounts,
    compute_progress,
    count_statuses,
    percentage,
    resolve_progress,
)

__all__ = [
    "ProgressResolution",
    "StatusCounts",
    "compute_progress",
    "count_statuses",
    "percentage",
    "resolve_progress",
]
