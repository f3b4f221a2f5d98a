"""
View projection: the single entry point renderers consume.

Composes the hierarchy resolver, sequence index and progress aggregator into
an ordered node tree per workflow section:

* sections follow the precedence current, backlog, archive and appear only
  when they hold at least one task;
* within a section, parent nodes come first in input order, then the
  standalone section (standalone tasks and flagged orphans, input order);
* subtasks appear only under their parent, grouped into sequence cohorts;
  multi-member cohorts become parallel-group nodes;
* parent progress is always recomputed from the subtasks in the snapshot.

``is_last`` needs the full sibling list, so it is set once per sibling list
after the list is assembled rather than node by node.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tasktree.core.config.models import TaskTreeConfig
from tasktree.core.errors import TaskWarning, UnrecognizedValueWarning
from tasktree.core.hierarchy.resolver import (
    Partition,
    TaskIndex,
    build_partition,
    group_by_workflow_state,
)
from tasktree.core.metadata.normalizer import MetadataNormalizer, get_default_normalizer
from tasktree.core.metadata.schema import PRIORITY, STATUS, TYPE, WORKFLOW_STATE
from tasktree.core.progress.aggregator import count_statuses, resolve_progress
from tasktree.core.sequence.index import (
    SENTINEL_STEP,
    SequenceCohort,
    group_by_sequence_step,
    parse_base_sequence,
)
from tasktree.core.tasks.models import (
    WORKFLOW_DISPLAY_ORDER,
    Task,
    TaskPriority,
    TaskStatus,
    WorkflowState,
)

from .models import NodeKind, SectionView, TaskView, ViewNode

logger = logging.getLogger(__name__)


def _mark_last(nodes: list[ViewNode]) -> tuple[ViewNode, ...]:
    """Set is_last on the final node of a complete sibling list."""
    if not nodes:
        return ()
    return (*nodes[:-1], nodes[-1].model_copy(update={"is_last": True}))


class ViewProjector:
    """
    Builds TaskView trees from task snapshots.

    Holds only immutable settings; every call builds fresh output and never
    mutates its input, so one projector can be shared freely.

    Example:
        >>> projector = ViewProjector()
        >>> view = projector.project(tasks)
        >>> [s.workflow_state for s in view.sections]
        [<WorkflowState.CURRENT: 'current'>, <WorkflowState.BACKLOG: 'backlog'>]
    """

    def __init__(
        self,
        normalizer: MetadataNormalizer | None = None,
        sentinel_step: str = SENTINEL_STEP,
    ) -> None:
        self.normalizer = normalizer or get_default_normalizer()
        self.sentinel_step = sentinel_step

    @classmethod
    def from_config(cls, config: TaskTreeConfig) -> ViewProjector:
        """Build a projector using configured aliases, defaults and sentinel step."""
        return cls(
            normalizer=MetadataNormalizer.from_config(config.metadata),
            sentinel_step=config.sequence.sentinel_step,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def project(self, tasks: Sequence[Task]) -> TaskView:
        """
        Project a whole snapshot into ordered, non-empty sections.

        When several records share an ID only the first is projected; the
        rest are reported as a DuplicateTaskIdWarning.
        """
        snapshot = TaskIndex(tasks)
        buckets = group_by_workflow_state(snapshot, self.normalizer)

        sections: list[SectionView] = []
        warnings: list[TaskWarning] = list(snapshot.duplicate_warnings())
        for state in WORKFLOW_DISPLAY_ORDER:
            if not buckets[state]:
                continue
            section = self.project_section(state, buckets[state], snapshot=snapshot)
            sections.append(section)
            warnings.extend(section.warnings)

        return TaskView(sections=tuple(sections), warnings=tuple(warnings))

    def project_section(
        self,
        state: WorkflowState,
        tasks: Sequence[Task],
        *,
        snapshot: TaskIndex | None = None,
    ) -> SectionView:
        """
        Project the tasks of one workflow state.

        Args:
            state: Workflow state of the section
            tasks: The section's tasks, in display order
            snapshot: Index over the whole snapshot, used to explain orphans
        """
        partition = build_partition(
            tasks, workflow_state=state, snapshot=snapshot, normalizer=self.normalizer
        )
        warnings: list[TaskWarning] = list(partition.warnings)

        nodes: list[ViewNode] = [
            self._parent_node(parent, partition, warnings) for parent in partition.parent_tasks
        ]
        for task in partition.standalone_section:
            nodes.append(
                self._task_node(NodeKind.STANDALONE, task, warnings, orphaned=task.is_subtask)
            )

        return SectionView(
            workflow_state=state,
            nodes=_mark_last(nodes),
            counts=count_statuses(tasks, self.normalizer),
            warnings=tuple(warnings),
        )

    # ------------------------------------------------------------------
    # Node builders
    # ------------------------------------------------------------------

    def _parent_node(
        self, parent: Task, partition: Partition, warnings: list[TaskWarning]
    ) -> ViewNode:
        subtasks = partition.subtasks_of(parent.id)
        progress = resolve_progress(parent, subtasks, self.normalizer).progress
        cohorts = group_by_sequence_step(
            subtasks, sentinel_step=self.sentinel_step, parent_id=parent.id
        )

        children: list[ViewNode] = []
        for cohort in cohorts:
            warnings.extend(cohort.warnings)
            children.append(self._cohort_node(cohort, warnings))

        node = self._task_node(NodeKind.PARENT, parent, warnings)
        return node.model_copy(update={"progress": progress, "children": _mark_last(children)})

    def _cohort_node(self, cohort: SequenceCohort, warnings: list[TaskWarning]) -> ViewNode:
        members = [
            self._task_node(NodeKind.SUBTASK, task, warnings, step=cohort.step)
            for task in cohort.members
        ]
        if not cohort.is_parallel:
            return members[0]
        return ViewNode(
            kind=NodeKind.PARALLEL_GROUP,
            step=cohort.step,
            parent_id=cohort.members[0].parent_id,
            is_ambiguous=bool(cohort.warnings),
            children=_mark_last(members),
        )

    def _task_node(
        self,
        kind: NodeKind,
        task: Task,
        warnings: list[TaskWarning],
        *,
        step: str | None = None,
        orphaned: bool = False,
    ) -> ViewNode:
        status = self._resolve(task, STATUS, warnings)
        priority = self._resolve(task, PRIORITY, warnings)
        workflow_state = self._resolve(task, WORKFLOW_STATE, warnings)
        task_type = self.normalizer.resolve(TYPE, task.type).value

        if step is None and task.is_subtask:
            step = parse_base_sequence(task.sequence, self.sentinel_step)

        return ViewNode(
            kind=kind,
            task_id=task.id,
            title=task.title,
            status=TaskStatus(status),
            priority=TaskPriority(priority),
            type=task_type,
            workflow_state=WorkflowState(workflow_state),
            assignee=task.assignee,
            area=task.area,
            tags=task.tags,
            parent_id=task.parent_id if task.is_subtask else None,
            sequence=task.sequence,
            step=step,
            is_orphaned=orphaned,
        )

    def _resolve(self, task: Task, field: str, warnings: list[TaskWarning]) -> str:
        raw = getattr(task, field)
        result = self.normalizer.resolve(field, raw)
        if result.was_unrecognized:
            warnings.append(
                UnrecognizedValueWarning(
                    message=f"Unrecognized {field} {raw!r} on {task.id}, using {result.value!r}",
                    task_ids=(task.id,),
                    field=field,
                    value=str(raw),
                )
            )
        return result.value


def project_view(tasks: Sequence[Task]) -> TaskView:
    """Project a snapshot with the built-in schema and defaults."""
    return ViewProjector().project(tasks)


def project_section(
    state: WorkflowState, tasks: Sequence[Task], *, all_tasks: Sequence[Task] | None = None
) -> SectionView:
    """Project a single workflow state with the built-in schema and defaults."""
    snapshot = TaskIndex(all_tasks) if all_tasks is not None else None
    return ViewProjector().project_section(state, tasks, snapshot=snapshot)
