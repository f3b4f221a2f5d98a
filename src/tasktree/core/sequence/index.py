"""
Subtask sequence parsing and cohort grouping.

A sequence code orders a subtask within its parent. Codes that share a step
and differ only by one trailing lowercase letter ("04a", "04b") form a
parallel cohort meant to be worked concurrently. Subtasks without a code get
the sentinel step and sort last.

All ordering here is plain lexicographic string comparison, never numeric,
because codes are not guaranteed to be numeric. Grouping is order
independent: any permutation of the same subtasks yields identical cohorts.

Besides grouping, this module plans resequencing operations (making tasks
parallel, inserting a task after another). Planning is pure: it returns the
new code for each subtask and leaves writing them to the caller.
"""

from __future__ import annotations

import logging
import re
import string
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from tasktree.core.errors import InconsistentSequenceWarning
from tasktree.core.tasks.models import Task

logger = logging.getLogger(__name__)

# Step assigned to subtasks without a sequence code
SENTINEL_STEP = "99"

_VALID_SEQUENCE = re.compile(r"^(0[1-9]|[1-9][0-9])[a-z]?$")
_LEADING_DIGITS = re.compile(r"^(\d+)")


class SequenceCohort(BaseModel):
    """
    Subtasks sharing one sequence step.

    Members are ordered by full sequence code, then title, then ID.
    """

    model_config = ConfigDict(frozen=True)

    step: str = Field(..., description="Step key shared by all members (e.g. '04')")
    members: tuple[Task, ...] = Field(default=())
    warnings: tuple[InconsistentSequenceWarning, ...] = Field(default=())

    @property
    def is_parallel(self) -> bool:
        return is_parallel_group(self)

    @property
    def task_ids(self) -> list[str]:
        return [member.id for member in self.members]


@dataclass(frozen=True)
class SequenceAssignment:
    """Planned sequence code for one subtask."""

    task_id: str
    old: str | None
    new: str | None

    @property
    def changed(self) -> bool:
        return self.old != self.new


def parse_base_sequence(code: str | None, sentinel_step: str = SENTINEL_STEP) -> str:
    """
    Get the step key of a sequence code.

    Strips a single trailing lowercase letter: "04a" -> "04", "04" -> "04".
    A code that is only one letter is its own step. Missing codes map to the
    sentinel step.
    """
    if code is None or not code.strip():
        return sentinel_step
    code = code.strip()
    if len(code) > 1 and code[-1] in string.ascii_lowercase:
        return code[:-1]
    return code


def sequence_code(task: Task, sentinel_step: str = SENTINEL_STEP) -> str:
    """Full sequence code of a subtask, with the sentinel for missing codes."""
    return task.sequence if task.sequence else sentinel_step


def _member_sort_key(task: Task, sentinel_step: str) -> tuple[str, str, str]:
    return (sequence_code(task, sentinel_step), task.title, task.id)


def group_by_sequence_step(
    subtasks: Iterable[Task],
    *,
    sentinel_step: str = SENTINEL_STEP,
    parent_id: str | None = None,
) -> list[SequenceCohort]:
    """
    Group subtasks into cohorts ordered by step key.

    Args:
        subtasks: Subtasks of one parent, in any order
        sentinel_step: Step for subtasks without a sequence code
        parent_id: Parent ID, recorded on warnings

    Returns:
        Cohorts sorted lexicographically by step. Siblings that carry an
        identical explicit code stay together in one cohort and the cohort
        gets an InconsistentSequenceWarning.

    Example:
        >>> cohorts = group_by_sequence_step(subtasks)
        >>> [(c.step, c.task_ids) for c in cohorts]
        [('01', ['a']), ('02', ['b']), ('04', ['c', 'd'])]
    """
    buckets: dict[str, list[Task]] = {}
    for task in subtasks:
        step = parse_base_sequence(task.sequence, sentinel_step)
        buckets.setdefault(step, []).append(task)

    cohorts: list[SequenceCohort] = []
    for step in sorted(buckets):
        members = sorted(buckets[step], key=lambda t: _member_sort_key(t, sentinel_step))
        cohorts.append(
            SequenceCohort(
                step=step,
                members=tuple(members),
                warnings=tuple(_duplicate_code_warnings(members, parent_id)),
            )
        )
    return cohorts


def _duplicate_code_warnings(
    members: Sequence[Task], parent_id: str | None
) -> list[InconsistentSequenceWarning]:
    counts = Counter(t.sequence for t in members if t.sequence)
    warnings: list[InconsistentSequenceWarning] = []
    for code in sorted(c for c, n in counts.items() if n > 1):
        task_ids = tuple(sorted(t.id for t in members if t.sequence == code))
        logger.warning(
            f"Subtasks {', '.join(task_ids)} of {parent_id or 'unknown parent'} "
            f"share sequence {code!r}"
        )
        warnings.append(
            InconsistentSequenceWarning(
                message=f"{len(task_ids)} subtasks share sequence code {code!r}",
                task_ids=task_ids,
                parent_id=parent_id,
                sequence=code,
            )
        )
    return warnings


def is_parallel_group(cohort: SequenceCohort) -> bool:
    """
    Whether a cohort runs in parallel.

    True for any cohort with more than one member, which includes siblings
    that share an identical code (the ambiguous case).
    """
    return len(cohort.members) > 1


# ============================================================================
# Sequence validation and planning
# ============================================================================


def is_valid_sequence(code: str) -> bool:
    """Check a code is a two-digit step 01-99 with an optional letter suffix."""
    return bool(_VALID_SEQUENCE.match(code))


def _step_number(code: str | None) -> int | None:
    if not code:
        return None
    match = _LEADING_DIGITS.match(code.strip())
    return int(match.group(1)) if match else None


def next_sequence_number(codes: Iterable[str | None]) -> str:
    """
    Next free step after the highest numeric step in use.

    Returns "01" when no numeric codes exist.
    """
    numbers = [n for n in (_step_number(code) for code in codes) if n is not None]
    if not numbers:
        return "01"
    return f"{max(numbers) + 1:02d}"


def _renumber(cohorts: Sequence[Sequence[Task]]) -> list[SequenceAssignment]:
    """Assign steps 01, 02, ... to cohorts, lettering parallel members."""
    assignments: list[SequenceAssignment] = []
    for position, members in enumerate(cohorts, start=1):
        step = f"{position:02d}"
        if len(members) == 1:
            assignments.append(SequenceAssignment(members[0].id, members[0].sequence, step))
            continue
        if len(members) > len(string.ascii_lowercase):
            raise ValueError(f"Cannot letter {len(members)} parallel subtasks in one step")
        for letter, task in zip(string.ascii_lowercase, members):
            assignments.append(SequenceAssignment(task.id, task.sequence, f"{step}{letter}"))
    return assignments


def _split_unsequenced(subtasks: Sequence[Task]) -> tuple[list[Task], list[Task]]:
    sequenced = [t for t in subtasks if t.sequence]
    unsequenced = sorted((t for t in subtasks if not t.sequence), key=lambda t: (t.title, t.id))
    return sequenced, unsequenced


def _find(subtasks: Sequence[Task], task_id: str) -> Task:
    for task in subtasks:
        if task.id == task_id:
            return task
    raise ValueError(f"Task not found: {task_id}")


def plan_parallel(
    subtasks: Sequence[Task],
    task_ids: Sequence[str],
    target: str | None = None,
) -> list[SequenceAssignment]:
    """
    Plan a resequence that makes the given subtasks one parallel cohort.

    The cohort is placed at ``target`` or, by default, at the lowest step of
    the selected subtasks. Other cohorts keep their relative order and
    membership; everything is renumbered 01, 02, ... with parallel members
    lettered a, b, c in the order given. Unsequenced subtasks stay
    unsequenced.

    Raises:
        ValueError: If fewer than two IDs are given or an ID is unknown
    """
    if len(set(task_ids)) < 2:
        raise ValueError("At least 2 tasks required to make parallel")

    selected = [_find(subtasks, task_id) for task_id in dict.fromkeys(task_ids)]
    selected_ids = {t.id for t in selected}

    if target is None:
        steps = sorted(parse_base_sequence(t.sequence) for t in selected if t.sequence)
        target = steps[0] if steps else "01"

    others, unsequenced = _split_unsequenced([t for t in subtasks if t.id not in selected_ids])
    other_cohorts = [list(c.members) for c in group_by_sequence_step(others)]
    before = [c for c in other_cohorts if parse_base_sequence(c[0].sequence) < target]
    after = [c for c in other_cohorts if parse_base_sequence(c[0].sequence) >= target]

    assignments = _renumber([*before, selected, *after])
    assignments.extend(SequenceAssignment(t.id, t.sequence, t.sequence) for t in unsequenced)
    return assignments


def plan_insert_after(
    subtasks: Sequence[Task], task_id: str, after_id: str
) -> list[SequenceAssignment]:
    """
    Plan moving one subtask into its own step directly after another's cohort.

    Later steps shift up by one.

    Raises:
        ValueError: If either ID is unknown, they are the same task, or the
            anchor subtask has no sequence code
    """
    if task_id == after_id:
        raise ValueError("Cannot insert a task after itself")

    task = _find(subtasks, task_id)
    anchor = _find(subtasks, after_id)
    if not anchor.sequence:
        raise ValueError(f"Invalid subtask sequence for {after_id}")

    others, unsequenced = _split_unsequenced([t for t in subtasks if t.id != task.id])
    cohorts = [list(c.members) for c in group_by_sequence_step(others)]
    anchor_step = parse_base_sequence(anchor.sequence)
    position = next(
        i for i, c in enumerate(cohorts) if parse_base_sequence(c[0].sequence) == anchor_step
    )
    cohorts.insert(position + 1, [task])

    assignments = _renumber(cohorts)
    assignments.extend(SequenceAssignment(t.id, t.sequence, t.sequence) for t in unsequenced)
    return assignments
