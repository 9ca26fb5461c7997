# tests/test_console.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktrack.cli import commands
from tasktrack.cli.bootstrap import create_initial_state, load_warning
from tasktrack.connectors.console_connector import acknowledge_load_warning, handle_line
from tasktrack.core.state import AppState


def test_bootstrap_builds_state_from_settings(settings: SimpleNamespace) -> None:
    settings.default_sort_field = "priority"
    settings.default_sort_ascending = False

    state = create_initial_state(settings=settings)

    assert state.task_store.count_tasks() == 0
    assert state.task_store.load_report.source == "missing"
    assert (state.sort.field, state.sort.ascending) == ("priority", False)
    assert load_warning(state) is None


def test_data_loss_warning_blocks_until_acknowledged(settings: SimpleNamespace) -> None:
    Path(settings.tasks_path).write_text("garbage", "utf-8")
    Path(settings.backup_path).write_text("more garbage", "utf-8")

    state = create_initial_state(settings=settings)
    written: list[str] = []
    prompts: list[str] = []

    def read(prompt: str) -> str:
        prompts.append(prompt)
        return ""

    assert acknowledge_load_warning(state, read=read, write=written.append) is True
    assert "EMPTY task list" in written[0]
    assert prompts == ["Press Enter to continue..."]


def test_backup_recovery_warning(settings: SimpleNamespace) -> None:
    Path(settings.tasks_path).write_text("garbage", "utf-8")
    Path(settings.backup_path).write_text("[]", "utf-8")

    state = create_initial_state(settings=settings)

    warning = load_warning(state)
    assert warning is not None and "recovered from the backup" in warning


def test_closing_stdin_at_warning_returns_false(settings: SimpleNamespace) -> None:
    Path(settings.tasks_path).write_text("garbage", "utf-8")
    state = create_initial_state(settings=settings)

    def read(prompt: str) -> str:
        raise EOFError

    assert acknowledge_load_warning(state, read=read, write=lambda _: None) is False


def test_handle_line_survives_crashing_handler(state: AppState, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(commands.registry, "handle", boom)

    reply = handle_line(state, "/list")
    assert reply is not None and "Internal error" in reply


def test_handle_line_non_command(state: AppState) -> None:
    assert "Commands start with '/'" in (handle_line(state, "hello") or "")
