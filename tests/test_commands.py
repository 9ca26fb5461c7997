# tests/test_commands.py

from __future__ import annotations

from datetime import date

from tasktrack.cli.commands import CommandRegistry, registry
from tasktrack.core.state import AppState
from tasktrack.tasks.task_models import Priority, Recurrence, TaskStatus


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called["h2"] == 1
    assert called["h3"] == 1


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_add_with_fields(state: AppState) -> None:
    reply = registry.handle(
        state,
        "/add Pay rent | due=end of month | project=Home | priority=critical | tags=money, bills | recur=monthly",
    )
    assert reply is not None and reply.startswith("Task added: Pay rent")

    (task,) = state.task_store.all_tasks()
    assert task.due_date == date(2024, 1, 31)
    assert task.project == "Home"
    assert task.priority == Priority.CRITICAL
    assert task.tags == ["money", "bills"]
    assert task.recurrence == Recurrence.MONTHLY


def test_add_defaults_due_to_today(state: AppState) -> None:
    registry.handle(state, "/add Quick note")
    (task,) = state.task_store.all_tasks()
    assert task.due_date == date(2024, 1, 10)
    assert task.priority == Priority.MEDIUM


def test_add_with_bad_date_reports_error_and_adds_nothing(state: AppState) -> None:
    reply = registry.handle(state, "/add Something | due=someday")
    assert reply is not None and "Invalid date format" in reply
    assert state.task_store.count_tasks() == 0

    reply = registry.handle(state, "/add Something | due=in 0 days")
    assert reply is not None and "positive" in reply
    assert state.task_store.count_tasks() == 0


def test_add_rejects_unknown_field(state: AppState) -> None:
    reply = registry.handle(state, "/add X | colour=red")
    assert reply is not None and "Bad field" in reply
    assert state.task_store.count_tasks() == 0


def test_list_then_act_by_position(state: AppState) -> None:
    registry.handle(state, "/add Later | due=2024-02-01")
    registry.handle(state, "/add Sooner | due=tomorrow")

    listing = registry.handle(state, "/list")
    assert listing is not None
    assert listing.index("Sooner") < listing.index("Later")
    assert len(state.last_listing) == 2

    registry.handle(state, "/done 1")
    sooner = state.task_store.find(state.last_listing[0])
    assert sooner is not None and sooner.status == TaskStatus.DONE

    registry.handle(state, "/start 2")
    later = state.task_store.find(state.last_listing[1])
    assert later is not None and later.status == TaskStatus.IN_PROGRESS

    reply = registry.handle(state, "/list done")
    assert reply is not None and "Sooner" in reply and "Later" not in reply


def test_edit_by_id_prefix(state: AppState) -> None:
    registry.handle(state, "/add Draft")
    (task,) = state.task_store.all_tasks()

    reply = registry.handle(state, f"/edit {task.id[:8]} | title=Final | due=friday | priority=low")
    assert reply == "Task updated: Final"

    updated = state.task_store.find(task.id)
    assert updated is not None
    assert (updated.title, updated.due_date, updated.priority) == ("Final", date(2024, 1, 12), Priority.LOW)


def test_delete_and_undo(state: AppState) -> None:
    for title in ("one", "two", "three"):
        registry.handle(state, f"/add {title}")
    registry.handle(state, "/sort title")
    registry.handle(state, "/list")

    reply = registry.handle(state, "/delete 1 3 99")
    assert reply is not None and "Deleted 2 task(s)" in reply and "Unknown: 99" in reply
    assert [t.title for t in state.task_store.all_tasks()] == ["three"]

    assert registry.handle(state, "/undo") == "Restored the last deleted task (1 more in trash)."
    assert {t.title for t in state.task_store.all_tasks()} == {"three", "two"}
    registry.handle(state, "/undo")
    assert registry.handle(state, "/undo") == "Nothing to undo."


def test_sort_command_updates_session_state(state: AppState) -> None:
    assert registry.handle(state, "/sort priority desc") == "Sort: priority (descending)"
    assert state.sort.field == "priority" and state.sort.ascending is False
    assert registry.handle(state, "/sort") == "Sort: priority (ascending)"
    assert "Unknown sort field" in (registry.handle(state, "/sort colour") or "")


def test_stats_projects_tags(state: AppState) -> None:
    registry.handle(state, "/add A | project=Work | tags=x,y | priority=high")
    registry.handle(state, "/add B | project=Home | due=yesterday")

    stats = registry.handle(state, "/stats") or ""
    assert "Total" in stats and "HighPriority" in stats
    assert registry.handle(state, "/projects") == "Projects:\n  Home\n  Work"
    assert registry.handle(state, "/tags") == "Tags:\n  x\n  y"


def test_export_command_writes_csv(state: AppState) -> None:
    registry.handle(state, "/add Exported")
    messages: list[str] = []

    reply = registry.handle(state, "/export", emit=messages.append)

    assert reply is not None and reply.startswith("Exported 1 task(s)")
    assert messages
    assert "Exported" in state.settings.export_path.read_text("utf-8")


def test_date_preview(state: AppState) -> None:
    assert registry.handle(state, "/date next monday") == "2024-01-15 (Monday)"
    assert (registry.handle(state, "/date whenever") or "").startswith("Not a date:")


def test_save_failure_is_reported_to_user(state: AppState, persistence) -> None:
    persistence.fail_saves = True
    reply = registry.handle(state, "/add Unsaved")
    assert reply is not None and "could not be saved" in reply
    assert state.task_store.count_tasks() == 1
