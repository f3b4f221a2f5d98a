"""
Pytest configuration and shared fixtures.

Provides task factories, the reference parent/subtask snapshot, snapshot
files on disk, and config isolation used across the test suite.
"""

import json
from pathlib import Path
from typing import Any

import pytest

from tasktree.core.config import clear_cache
from tasktree.core.tasks.models import ParentTask, Progress, Task, TaskStructure

# ==============================================================================
# Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config, env overrides and the config cache out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.delenv("TASKTREE_SENTINEL_STEP", raising=False)
    monkeypatch.delenv("TASKTREE_DEFAULT_PRIORITY", raising=False)
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Task factories
# ==============================================================================


def _task(task_id: str, **fields: Any) -> Task:
    """Shorthand for a simple task in the current workflow state."""
    fields.setdefault("title", f"Task {task_id}")
    fields.setdefault("workflow_state", "current")
    return Task(id=task_id, **fields)


def _parent(task_id: str, **fields: Any) -> ParentTask:
    """Shorthand for a parent task in the current workflow state."""
    fields.setdefault("title", f"Parent {task_id}")
    fields.setdefault("workflow_state", "current")
    return ParentTask(id=task_id, **fields)


def _subtask(task_id: str, parent_id: str, sequence: str | None = None, **fields: Any) -> Task:
    """Shorthand for a subtask of *parent_id*."""
    fields.setdefault("title", f"Subtask {task_id}")
    fields.setdefault("workflow_state", "current")
    return Task(
        id=task_id,
        parent_id=parent_id,
        sequence=sequence,
        task_structure=TaskStructure.SUBTASK,
        **fields,
    )


@pytest.fixture
def make_task():
    """Factory for simple tasks: make_task("t1", status="done")."""
    return _task


@pytest.fixture
def make_parent():
    """Factory for parent tasks: make_parent("P", subtask_ids=("A",))."""
    return _parent


@pytest.fixture
def make_subtask():
    """Factory for subtasks: make_subtask("A", "P", "04a", status="todo")."""
    return _subtask


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def scenario_subtasks() -> list[Task]:
    """Subtasks A-D of parent P: 01 done, 02 in progress, 04a/04b todo."""
    return [
        _subtask("A", "P", "01", status="done"),
        _subtask("B", "P", "02", status="in_progress"),
        _subtask("C", "P", "04a", status="todo"),
        _subtask("D", "P", "04b", status="todo"),
    ]


@pytest.fixture
def scenario_parent() -> ParentTask:
    """Parent P with a stale stored progress value."""
    return _parent(
        "P",
        subtask_ids=("A", "B", "C", "D"),
        progress=Progress(completed=3, total=4, percentage=75),
    )


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """Task records as a data source would export them (camelCase, legacy values)."""
    return [
        {
            "id": "auth-05A",
            "title": "Build auth",
            "type": "feature",
            "status": "🔵 In Progress",
            "priority": "🔼 High",
            "workflowState": "current",
            "taskStructure": "parent",
            "subtaskIds": ["01_design-05B", "02_impl-05C"],
        },
        {
            "id": "01_design-05B",
            "title": "Design login",
            "status": "🟢 Done",
            "workflowState": "current",
            "taskStructure": "subtask",
            "parentId": "auth-05A",
            "sequence": "01",
        },
        {
            "id": "02_impl-05C",
            "title": "Implement login",
            "status": "🟡 To Do",
            "priority": "▶️ Medium",
            "workflowState": "current",
            "taskStructure": "subtask",
            "parentId": "auth-05A",
            "sequence": "02",
            "assignee": "sam",
            "tags": ["auth", "ui"],
        },
        {
            "id": "fix-typo-05D",
            "title": "Fix typo",
            "type": "bug",
            "status": "todo",
            "priority": "low",
            "workflowState": "backlog",
        },
    ]


@pytest.fixture
def snapshot_file(tmp_path: Path, sample_records) -> Path:
    """Write sample_records to a JSON snapshot file."""
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps(sample_records), encoding="utf-8")
    return path
