"""
Snapshot loading for the CLI.

Reads a JSON file holding task records (a list, or an object with a "tasks"
list) and validates them into Task/ParentTask models. Parsing task files
themselves is the data source's job; this only accepts records it exported.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tasktree.core.tasks.models import Task, task_from_record


class SnapshotError(Exception):
    """A snapshot file could not be read or validated."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


def load_snapshot(path: Path) -> list[Task]:
    """
    Load task records from a JSON snapshot file.

    Raises:
        SnapshotError: If the file is missing, not JSON, or holds invalid records
    """
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SnapshotError(path, "file not found") from None
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotError(path, f"cannot read file ({e})") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(path, f"invalid JSON at line {e.lineno}") from e

    if isinstance(data, dict):
        data = data.get("tasks")
    if not isinstance(data, list):
        raise SnapshotError(path, "expected a list of task records")

    tasks: list[Task] = []
    for position, record in enumerate(data):
        if not isinstance(record, dict):
            raise SnapshotError(path, f"record {position} is not an object")
        try:
            tasks.append(task_from_record(record))
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise SnapshotError(
                path, f"record {position} ({location}): {first['msg']}"
            ) from e
    return tasks
