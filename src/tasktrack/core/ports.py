# src/tasktrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task store depends on a Protocol instead of the concrete JSON file adapter.
This keeps the storage swappable and lets tests run against an in-memory fake.
"""

from collections.abc import Iterable
from typing import Any, Protocol


class TaskPersistence(Protocol):
    """
    Flat-record storage for the active task collection.

    load() must tolerate a missing or corrupt primary file (backup, then empty).
    save() may raise OSError; the store decides how to report it.
    """

    def load(self) -> Any: ...  # LoadResult (kept as Any to avoid import coupling)

    def save(self, tasks: Iterable[Any]) -> None: ...
