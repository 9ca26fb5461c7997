# src/tasktrack/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any

from ..core.ports import TaskPersistence
from .recurrence import next_due_date
from .task_models import Priority, Recurrence, Task, TaskStatus, new_task_id

logger = logging.getLogger(__name__)


def matches_term(task: Task, term: str) -> bool:
    """Case-insensitive substring match on title, project, description or any tag."""
    needle = term.casefold()
    return (
        needle in task.title.casefold()
        or needle in task.project.casefold()
        or needle in task.description.casefold()
        or any(needle in tag.casefold() for tag in task.tags)
    )


class TaskView:
    """
    Lazy, restartable view over the active collection.

    Each iteration re-reads the live list, so the view reflects later mutations.
    Callers wanting a snapshot should wrap it in list().
    """

    def __init__(self, source: list[Task], predicate: Callable[[Task], bool] | None = None) -> None:
        self._source = source
        self._predicate = predicate

    def __iter__(self) -> Iterator[Task]:
        for task in list(self._source):
            if self._predicate is None or self._predicate(task):
                yield task


class TaskStore:
    """
    In-memory task collection with file-backed persistence.

    - every mutation saves through the persistence port before returning
    - save failures are logged and kept in `last_save_error`, never raised;
      the in-memory state stays authoritative for the running process
    - deleted tasks go onto a trash stack (one entry per task) for LIFO undo
    - recurring Done tasks roll over once, during load()
    """

    def __init__(
        self,
        persistence: TaskPersistence,
        *,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._persistence = persistence
        self._clock = clock
        self._tasks: list[Task] = []
        self._trash: list[Task] = []
        self.load_report: Any = None  # LoadResult from the last load()
        self.last_save_error: Exception | None = None

    # ---- low-level helpers ----

    def today(self) -> date:
        return self._clock()

    def _index_of(self, task_id: str) -> int:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return -1

    def _save(self) -> bool:
        try:
            self._persistence.save(self._tasks)
        except Exception as e:
            self.last_save_error = e
            logger.exception("Failed to save %d tasks; keeping in-memory state.", len(self._tasks))
            return False
        self.last_save_error = None
        return True

    # ---- load + rollover ----

    def load(self) -> None:
        """
        Replace the active collection with what persistence returns, then roll over
        recurring Done tasks. Saves once if any rollover happened.
        """
        result = self._persistence.load()
        self.load_report = result
        self._tasks[:] = result.tasks
        self._trash.clear()

        spawned = self._roll_over_recurring()
        if spawned:
            logger.info("Recurring rollover created %d new tasks.", spawned)
            self._save()

        logger.info(
            "TaskStore ready source=%s total=%d", getattr(result, "source", "?"), len(self._tasks)
        )

    def _roll_over_recurring(self) -> int:
        spawned = 0
        for task in list(self._tasks):
            if task.status != TaskStatus.DONE or task.recurrence == Recurrence.NONE:
                continue
            successor = replace(
                task,
                id=new_task_id(),
                created_at=datetime.now(),
                status=TaskStatus.PENDING,
                tags=list(task.tags),
                due_date=next_due_date(task.due_date, task.recurrence),
            )
            self._tasks.append(successor)
            task.recurrence = Recurrence.NONE
            spawned += 1
            logger.debug(
                "Rolled over task id=%s -> id=%s due=%s",
                task.id,
                successor.id,
                successor.due_date,
            )
        return spawned

    # ---- CRUD ----

    def add(self, task: Task) -> None:
        self._tasks.append(task)
        logger.debug("Task added id=%s title=%r due=%s", task.id, task.title, task.due_date)
        self._save()

    def find(self, task_id: str) -> Task | None:
        i = self._index_of(task_id)
        return self._tasks[i] if i >= 0 else None

    def update(self, task: Task) -> bool:
        """Replace the stored task with the same id. Unknown id is a silent no-op."""
        i = self._index_of(task.id)
        if i < 0:
            return False
        self._tasks[i] = task
        self._save()
        return True

    def delete(self, task_id: str) -> bool:
        i = self._index_of(task_id)
        if i < 0:
            return False
        self._trash.append(self._tasks.pop(i))
        self._save()
        return True

    def undo_delete(self) -> bool:
        if not self._trash:
            return False
        task = self._trash.pop()
        self._tasks.append(task)
        logger.debug("Restored task id=%s", task.id)
        self._save()
        return True

    # ---- bulk ----

    def bulk_update_status(self, task_ids: Iterable[str], status: TaskStatus) -> bool:
        updated = False
        for task_id in task_ids:
            task = self.find(task_id)
            if task is not None:
                task.status = status
                updated = True
        if updated:
            self._save()
        return updated

    def bulk_delete(self, task_ids: Iterable[str]) -> bool:
        deleted = False
        for task_id in task_ids:
            i = self._index_of(task_id)
            if i >= 0:
                self._trash.append(self._tasks.pop(i))
                deleted = True
        if deleted:
            self._save()
        return deleted

    # ---- derived views ----

    @property
    def trash(self) -> list[Task]:
        return list(self._trash)

    def all_tasks(self) -> TaskView:
        return TaskView(self._tasks)

    def count_tasks(self) -> int:
        return len(self._tasks)

    def search(self, term: str) -> TaskView:
        return TaskView(self._tasks, lambda t: matches_term(t, term))

    def get_all_projects(self) -> list[str]:
        return sorted({t.project for t in self._tasks if t.project and t.project.strip()})

    def get_all_tags(self) -> list[str]:
        return sorted({tag for t in self._tasks for tag in t.tags if tag and tag.strip()})

    def get_task_statistics(self) -> dict[str, int]:
        today = self.today()
        week_end = today + timedelta(days=7)
        open_tasks = [t for t in self._tasks if t.status != TaskStatus.DONE]
        return {
            "Total": len(self._tasks),
            "Pending": sum(1 for t in self._tasks if t.status == TaskStatus.PENDING),
            "InProgress": sum(1 for t in self._tasks if t.status == TaskStatus.IN_PROGRESS),
            "Completed": sum(1 for t in self._tasks if t.status == TaskStatus.DONE),
            "Overdue": sum(1 for t in self._tasks if t.is_overdue(today)),
            "DueToday": sum(1 for t in open_tasks if t.due_date == today),
            "DueThisWeek": sum(1 for t in open_tasks if today <= t.due_date <= week_end),
            "HighPriority": sum(
                1 for t in self._tasks if t.priority in (Priority.HIGH, Priority.CRITICAL)
            ),
        }
