# src/tasktrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_store import TaskStore
from ..tasks.views import SortState


@dataclass
class AppState:
    """
    One interactive session.

    Sort order and the last listing live here (not in module globals) so
    command handlers stay testable without a console loop.
    """

    # Settings (or a SimpleNamespace in tests).
    settings: Any
    task_store: TaskStore

    sort: SortState = field(default_factory=SortState)
    # ids of the most recent listing; "3" in a command means last_listing[2]
    last_listing: list[str] = field(default_factory=list)
    color: bool = True
