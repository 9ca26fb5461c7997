# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktrack.core.state import AppState
from tasktrack.tasks.task_store import TaskStore

from .fakes import TODAY, FakePersistence


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI helpers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any .env file.
    """
    return SimpleNamespace(
        app_name="tasktrack-test",
        data_dir=tmp_path,
        tasks_path=tmp_path / "tasks.json",
        backup_path=tmp_path / "tasks_backup.json",
        export_path=tmp_path / "tasks_export.csv",
        default_sort_field="date",
        default_sort_ascending=True,
        color=False,
    )


@pytest.fixture()
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture()
def store(persistence: FakePersistence) -> TaskStore:
    """TaskStore over the in-memory fake, with the clock pinned to TODAY."""
    s = TaskStore(persistence, clock=lambda: TODAY)
    s.load()
    return s


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    return AppState(settings=settings, task_store=store, color=False)
