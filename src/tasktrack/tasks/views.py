# src/tasktrack/tasks/views.py

"""
Filtering and sorting helpers for task listings.

Pure functions over iterables of tasks; the console keeps its current sort
order in a SortState on the session, never in module globals.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from .task_models import Task, TaskStatus
from .task_store import matches_term

SORT_FIELDS: tuple[str, ...] = ("date", "project", "priority", "title", "status")

_SORT_KEYS: dict[str, Callable[[Task], Any]] = {
    "date": lambda t: t.due_date,
    "project": lambda t: t.project.casefold(),
    "priority": lambda t: t.priority.rank,
    "title": lambda t: t.title.casefold(),
    "status": lambda t: t.status.rank,
}


@dataclass(frozen=True, slots=True)
class SortState:
    field: str = "date"
    ascending: bool = True

    def with_field(self, field: str) -> SortState:
        """Select a field; picking the current field again flips the direction."""
        field = field if field in _SORT_KEYS else "date"
        if field == self.field:
            return self.toggle()
        return SortState(field=field, ascending=True)

    def toggle(self) -> SortState:
        return SortState(field=self.field, ascending=not self.ascending)

    def describe(self) -> str:
        return f"{self.field} ({'ascending' if self.ascending else 'descending'})"


def sort_tasks(tasks: Iterable[Task], field: str = "date", ascending: bool = True) -> list[Task]:
    key = _SORT_KEYS.get(field, _SORT_KEYS["date"])
    return sorted(tasks, key=key, reverse=not ascending)


def filter_tasks(
    tasks: Iterable[Task],
    *,
    status: TaskStatus | None = None,
    keyword: str | None = None,
    due_before: date | None = None,
    due_after: date | None = None,
    project: str | None = None,
    tag: str | None = None,
    overdue: bool = False,
    due_today: bool = False,
    due_this_week: bool = False,
    today: date | None = None,
) -> list[Task]:
    """All given criteria must hold. Project and tag compare case-insensitively."""
    today = today or date.today()
    week_end = today + timedelta(days=7)
    project_cf = project.strip().casefold() if project and project.strip() else None
    tag_cf = tag.strip().casefold() if tag and tag.strip() else None
    keyword = keyword.strip() if keyword and keyword.strip() else None

    out: list[Task] = []
    for t in tasks:
        if status is not None and t.status != status:
            continue
        if keyword is not None and not matches_term(t, keyword):
            continue
        if due_before is not None and t.due_date > due_before:
            continue
        if due_after is not None and t.due_date < due_after:
            continue
        if project_cf is not None and t.project.casefold() != project_cf:
            continue
        if tag_cf is not None and not any(tg.casefold() == tag_cf for tg in t.tags):
            continue
        if overdue and not t.is_overdue(today):
            continue
        if due_today and (t.status == TaskStatus.DONE or t.due_date != today):
            continue
        if due_this_week and (t.status == TaskStatus.DONE or not today <= t.due_date <= week_end):
            continue
        out.append(t)
    return out
