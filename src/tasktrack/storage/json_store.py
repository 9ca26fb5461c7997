# src/tasktrack/storage/json_store.py

from __future__ import annotations

import json
import logging
import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Literal

from dateutil.parser import isoparse

from ..tasks.task_models import Priority, Recurrence, Task, TaskStatus

logger = logging.getLogger(__name__)

LoadSource = Literal["primary", "backup", "missing", "empty"]


@dataclass(slots=True)
class LoadResult:
    """
    Outcome of JsonTaskFile.load().

    source:
    - primary: primary file read fine
    - backup:  primary unreadable, tasks came from the backup snapshot
    - missing: no primary file yet (fresh start)
    - empty:   primary and backup both unreadable, starting with nothing
    """

    tasks: list[Task]
    source: LoadSource
    errors: list[str] = field(default_factory=list)

    @property
    def data_lost(self) -> bool:
        return self.source == "empty"


class TaskFileError(ValueError):
    """Task file exists but cannot be decoded into tasks."""


# ---- record <-> Task ----
# Field names are part of the file format; do not rename.


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "Id": task.id,
        "Title": task.title,
        "Description": task.description,
        "DueDate": task.due_date.isoformat(),
        "CreatedDate": task.created_at.isoformat(),
        "Status": task.status.value,
        "Project": task.project,
        "Priority": task.priority.value,
        "Tags": list(task.tags),
        "Recurrence": task.recurrence.value,
    }


def _to_date(raw: Any) -> date:
    if not isinstance(raw, str) or not raw.strip():
        raise TaskFileError(f"bad DueDate: {raw!r}")
    try:
        return isoparse(raw.strip()).date()
    except ValueError as e:
        raise TaskFileError(f"bad DueDate: {raw!r}") from e


def _to_datetime(raw: Any) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        return datetime.now()
    try:
        return isoparse(raw.strip())
    except ValueError:
        logger.warning("Bad CreatedDate %r; using now.", raw)
        return datetime.now()


def record_to_task(rec: Any) -> Task:
    if not isinstance(rec, dict):
        raise TaskFileError(f"task record must be an object, got {type(rec).__name__}")

    task_id = rec.get("Id")
    if not isinstance(task_id, str) or not task_id:
        raise TaskFileError(f"task record without Id: {rec!r}")

    tags_raw = rec.get("Tags") or []
    if not isinstance(tags_raw, list):
        raise TaskFileError(f"Tags must be a list for task {task_id}")

    try:
        status = TaskStatus.from_raw(rec.get("Status"))
        priority = Priority.from_raw(rec.get("Priority"))
        recurrence = Recurrence.from_raw(rec.get("Recurrence"))
    except ValueError as e:
        raise TaskFileError(f"task {task_id}: {e}") from e

    return Task(
        id=task_id,
        title=str(rec.get("Title") or ""),
        description=str(rec.get("Description") or ""),
        due_date=_to_date(rec.get("DueDate")),
        created_at=_to_datetime(rec.get("CreatedDate")),
        status=status,
        project=str(rec.get("Project") or ""),
        priority=priority,
        tags=[str(t) for t in tags_raw],
        recurrence=recurrence,
    )


class JsonTaskFile:
    """
    JSON file pair (primary + backup) holding the active task list.

    Every save copies the current primary over the backup first, then writes
    the new primary atomically (temp file + os.replace). No file handle is kept
    open between calls.
    """

    def __init__(self, path: str | Path, backup_path: str | Path | None = None) -> None:
        self._path = Path(path)
        self._backup_path = (
            Path(backup_path)
            if backup_path is not None
            else self._path.with_name(f"{self._path.stem}_backup{self._path.suffix}")
        )

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        return self._backup_path

    def _read(self, path: Path) -> list[Task]:
        try:
            data = json.loads(path.read_text("utf-8"))
        except json.JSONDecodeError as e:
            raise TaskFileError(f"{path}: invalid JSON ({e})") from e
        if data is None:
            return []
        if not isinstance(data, list):
            raise TaskFileError(f"{path}: expected a list of tasks")
        return [record_to_task(rec) for rec in data]

    def load(self) -> LoadResult:
        if not self._path.exists():
            logger.info("No task file at %s; starting fresh.", self._path)
            return LoadResult(tasks=[], source="missing")

        errors: list[str] = []
        try:
            tasks = self._read(self._path)
            logger.info("Loaded %d tasks from %s", len(tasks), self._path)
            return LoadResult(tasks=tasks, source="primary")
        except (OSError, UnicodeDecodeError, TaskFileError) as e:
            logger.warning("Task file %s unreadable: %s", self._path, e)
            errors.append(str(e))

        if self._backup_path.exists():
            try:
                tasks = self._read(self._backup_path)
                logger.warning(
                    "Recovered %d tasks from backup %s", len(tasks), self._backup_path
                )
                return LoadResult(tasks=tasks, source="backup", errors=errors)
            except (OSError, UnicodeDecodeError, TaskFileError) as e:
                logger.error("Backup file %s unreadable: %s", self._backup_path, e)
                errors.append(str(e))
        else:
            errors.append(f"{self._backup_path}: backup file missing")

        logger.error("Task file and backup both unreadable; starting with an empty list.")
        return LoadResult(tasks=[], source="empty", errors=errors)

    def save(self, tasks: Iterable[Task]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if self._path.exists():
            self._backup_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self._path, self._backup_path)

        payload = [task_to_record(t) for t in tasks]
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        logger.debug("Saved %d tasks to %s", len(payload), self._path)
