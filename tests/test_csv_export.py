# tests/test_csv_export.py

from __future__ import annotations

import csv
from datetime import date
from pathlib import Path

from tasktrack.storage.csv_export import CSV_HEADER, export_csv, render_csv
from tasktrack.tasks.task_models import Priority, Recurrence, Task, TaskStatus


def _task(**kw) -> Task:
    kw.setdefault("title", "Plain")
    kw.setdefault("due_date", date(2024, 3, 9))
    return Task(**kw)


def test_header_and_column_order() -> None:
    t = _task(project="Home", priority=Priority.HIGH, tags=["a", "b"],
              recurrence=Recurrence.WEEKENDS, status=TaskStatus.IN_PROGRESS)
    lines = render_csv([t]).splitlines()

    assert lines[0] == "Id,Title,Description,DueDate,Status,Project,Priority,Tags,Recurrence"
    assert lines[1] == f"{t.id},Plain,,2024-03-09,InProgress,Home,High,a;b,Weekends"


def test_fields_with_delimiter_or_quotes_are_quoted() -> None:
    t = _task(title='Say "hello", world', description="one, two")
    row = render_csv([t]).splitlines()[1]
    assert '"Say ""hello"", world"' in row
    assert '"one, two"' in row


def test_export_file_reads_back_with_csv_module(tmp_path: Path) -> None:
    tasks = [
        _task(title="First", description="line one\nline two", tags=["x"]),
        _task(title="Second", project="Work, misc"),
    ]
    path = tmp_path / "out" / "tasks.csv"

    assert export_csv(tasks, path) == 2

    with path.open(encoding="utf-8", newline="") as fh:
        rows = list(csv.reader(fh))
    assert tuple(rows[0]) == CSV_HEADER
    assert rows[1][1:4] == ["First", "line one\nline two", "2024-03-09"]
    assert rows[2][5] == "Work, misc"


def test_export_empty_collection(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    assert export_csv([], path) == 0
    assert path.read_text("utf-8").splitlines() == [",".join(CSV_HEADER)]
