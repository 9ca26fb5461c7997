# src/tasktrack/storage/csv_export.py

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable
from pathlib import Path

from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

CSV_HEADER = (
    "Id",
    "Title",
    "Description",
    "DueDate",
    "Status",
    "Project",
    "Priority",
    "Tags",
    "Recurrence",
)


def task_to_row(task: Task) -> list[str]:
    return [
        task.id,
        task.title,
        task.description,
        task.due_date.isoformat(),
        task.status.value,
        task.project,
        task.priority.value,
        ";".join(task.tags),
        task.recurrence.value,
    ]


def _write_rows(fh, tasks: Iterable[Task]) -> int:
    # QUOTE_MINIMAL: quote only fields holding the delimiter, a quote or a newline
    writer = csv.writer(fh, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    n = 0
    for task in tasks:
        writer.writerow(task_to_row(task))
        n += 1
    return n


def render_csv(tasks: Iterable[Task]) -> str:
    buf = io.StringIO()
    _write_rows(buf, tasks)
    return buf.getvalue()


def export_csv(tasks: Iterable[Task], path: str | Path) -> int:
    """Write tasks to `path` as CSV. Returns the number of task rows written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as fh:
        n = _write_rows(fh, tasks)
    logger.info("Exported %d tasks to %s", n, path)
    return n
