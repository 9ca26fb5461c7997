# src/tasktrack/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Any transition is allowed (Pending <-> InProgress <-> Done); Done is not terminal.
    Values are the on-disk names and must stay stable.
    """

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    DONE = "Done"

    @classmethod
    def from_raw(cls, raw: str | int | None) -> TaskStatus:
        return _member(cls, raw, cls.PENDING)

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


class Priority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @classmethod
    def from_raw(cls, raw: str | int | None) -> Priority:
        return _member(cls, raw, cls.MEDIUM)

    @property
    def rank(self) -> int:
        return _PRIORITY_ORDER.index(self)


class Recurrence(StrEnum):
    NONE = "None"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"
    WEEKDAYS = "Weekdays"
    WEEKENDS = "Weekends"

    @classmethod
    def from_raw(cls, raw: str | int | None) -> Recurrence:
        return _member(cls, raw, cls.NONE)


def _member(cls, raw, default):
    """
    On-disk value -> enum member.

    Missing or empty means the default. An int is the member's position in
    declaration order (files written by the older .NET app store enums that
    way). Anything else must be an exact member value; otherwise ValueError.
    """
    if raw is None or raw == "":
        return default
    if isinstance(raw, int) and not isinstance(raw, bool):
        members = list(cls)
        if 0 <= raw < len(members):
            return members[raw]
        raise ValueError(f"{cls.__name__} index out of range: {raw}")
    if not isinstance(raw, str):
        raise ValueError(f"bad {cls.__name__} value: {raw!r}")
    return cls(raw)


_STATUS_ORDER = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.DONE)
_PRIORITY_ORDER = (Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL)


def new_task_id() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True)
class Task:
    title: str
    due_date: date

    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    project: str = ""
    priority: Priority = Priority.MEDIUM
    tags: list[str] = field(default_factory=list)
    recurrence: Recurrence = Recurrence.NONE

    id: str = field(default_factory=new_task_id)
    created_at: datetime = field(default_factory=datetime.now)

    def is_overdue(self, today: date | None = None) -> bool:
        today = today or date.today()
        return self.status != TaskStatus.DONE and self.due_date < today

    def is_due_soon(self, today: date | None = None) -> bool:
        """Not done, not overdue, and due within the next two days."""
        today = today or date.today()
        return (
            self.status != TaskStatus.DONE
            and not self.is_overdue(today)
            and self.due_date <= today + timedelta(days=2)
        )
