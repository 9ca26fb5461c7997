# src/tasktrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local data directory exists,
- wires the JSON file adapter into the TaskStore and performs the initial load
  (which is also when recurring tasks roll over),
- builds the AppState for the console session.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..storage.json_store import JsonTaskFile
from ..tasks.task_store import TaskStore
from ..tasks.views import SortState

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)
    settings.backup_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(JsonTaskFile(settings.tasks_path, settings.backup_path))
    store.load()

    return AppState(
        settings=settings,
        task_store=store,
        sort=SortState(
            field=getattr(settings, "default_sort_field", "date"),
            ascending=getattr(settings, "default_sort_ascending", True),
        ),
        color=getattr(settings, "color", True),
    )


def load_warning(state: AppState) -> str | None:
    """
    A user-facing warning when the initial load lost or recovered data, else None.
    """
    report = state.task_store.load_report
    if report is None:
        return None

    if report.source == "backup":
        return (
            "WARNING: the task file could not be read; tasks were recovered from the backup.\n"
            "Changes made since the previous save may be missing.\n"
            + "\n".join(f"  - {e}" for e in report.errors)
        )

    if report.source == "empty":
        path = getattr(state.settings, "tasks_path", "?")
        return (
            "WARNING: neither the task file nor its backup could be read.\n"
            f"Starting with an EMPTY task list. The unreadable file is {path};\n"
            "it will be overwritten on the next change. Copy it away now if you want to keep it.\n"
            + "\n".join(f"  - {e}" for e in report.errors)
        )

    return None
