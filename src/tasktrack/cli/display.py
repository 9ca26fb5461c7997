# src/tasktrack/cli/display.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from enum import Enum

from ..tasks.task_models import Priority, Task, TaskStatus


class DisplayHint(str, Enum):
    """What a renderer should emphasize for a task. Colors are the renderer's business."""

    DONE = "done"
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    CRITICAL = "critical"
    HIGH = "high"
    IN_PROGRESS = "in_progress"
    NORMAL = "normal"


def display_hint(task: Task, today: date | None = None) -> DisplayHint:
    """First matching rule wins: done, overdue, due soon, priority, in progress."""
    today = today or date.today()
    if task.status == TaskStatus.DONE:
        return DisplayHint.DONE
    if task.is_overdue(today):
        return DisplayHint.OVERDUE
    if task.is_due_soon(today):
        return DisplayHint.DUE_SOON
    if task.priority == Priority.CRITICAL:
        return DisplayHint.CRITICAL
    if task.priority == Priority.HIGH:
        return DisplayHint.HIGH
    if task.status == TaskStatus.IN_PROGRESS:
        return DisplayHint.IN_PROGRESS
    return DisplayHint.NORMAL


_ANSI: dict[DisplayHint, str] = {
    DisplayHint.DONE: "\033[32m",
    DisplayHint.OVERDUE: "\033[91m",
    DisplayHint.DUE_SOON: "\033[93m",
    DisplayHint.CRITICAL: "\033[31m",
    DisplayHint.HIGH: "\033[33m",
    DisplayHint.IN_PROGRESS: "\033[96m",
    DisplayHint.NORMAL: "",
}
_RESET = "\033[0m"


def colorize(text: str, hint: DisplayHint, *, enabled: bool = True) -> str:
    code = _ANSI.get(hint, "")
    if not enabled or not code:
        return text
    return f"{code}{text}{_RESET}"


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def format_table(tasks: Iterable[Task], *, today: date | None = None, color: bool = True) -> str:
    today = today or date.today()
    header = f"{'#':<4} | {'Title':<25} | {'Due Date':<10} | {'Project':<15} | {'Priority':<8} | {'Status':<10}"
    lines = [header, "-" * len(header)]
    for i, t in enumerate(tasks, start=1):
        row = (
            f"{i:<4} | {_truncate(t.title, 25):<25} | {t.due_date.isoformat():<10} | "
            f"{_truncate(t.project, 15):<15} | {t.priority.value:<8} | {t.status.value:<10}"
        )
        lines.append(colorize(row, display_hint(t, today), enabled=color))
    if len(lines) == 2:
        lines.append("(no tasks)")
    return "\n".join(lines)


def format_task(task: Task, *, today: date | None = None, color: bool = True) -> str:
    lines = [
        "-" * 60,
        f"ID: {task.id}",
        f"Title: {task.title}",
    ]
    if task.description.strip():
        lines.append(f"Description: {task.description}")
    lines += [
        f"Due Date: {task.due_date.isoformat()}",
        f"Status: {task.status.value}",
        f"Project: {task.project}",
        f"Priority: {task.priority.value}",
    ]
    if task.tags:
        lines.append(f"Tags: {', '.join(task.tags)}")
    lines.append(f"Recurs: {task.recurrence.value}")
    lines.append("-" * 60)
    return colorize("\n".join(lines), display_hint(task, today), enabled=color)


def format_statistics(stats: dict[str, int]) -> str:
    width = max((len(k) for k in stats), default=0)
    return "\n".join(f"  {k:<{width}} : {v}" for k, v in stats.items())
