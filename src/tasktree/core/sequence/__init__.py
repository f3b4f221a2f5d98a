"""
Subtask sequencing.

Parses sequence codes, groups subtasks into ordered, possibly parallel
cohorts and plans resequencing operations.
"""

from .index import (
    SENTINEL_STEP,
    SequenceAssignment,
    SequenceCohort,
    group_by_sequence_step,
    is_parallel_group,
    is_valid_sequence,
    next_sequence_number,
    parse_base_sequence,
    plan_insert_after,
    plan_parallel,
    sequence_code,
)

__all__ = [
    "SENTINEL_STEP",
    "SequenceAssignment",
    "SequenceCohort",
    "group_by_sequence_step",
    "is_parallel_group",
    "is_valid_sequence",
    "next_sequence_number",
    "parse_base_sequence",
    "plan_insert_after",
    "plan_parallel",
    "sequence_code",
]
