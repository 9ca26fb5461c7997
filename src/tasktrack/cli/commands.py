# src/tasktrack/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import cast

from ..core.state import AppState
from ..dates.parser import parse_date
from ..storage.csv_export import export_csv
from ..tasks.task_models import Priority, Recurrence, Task, TaskStatus
from ..tasks.views import SORT_FIELDS, filter_tasks, sort_tasks
from .display import format_statistics, format_table, format_task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----

_PRIORITIES = {p.value.lower(): p for p in Priority}
_RECURRENCES = {r.value.lower(): r for r in Recurrence}
_STATUSES = {
    "pending": TaskStatus.PENDING,
    "inprogress": TaskStatus.IN_PROGRESS,
    "in-progress": TaskStatus.IN_PROGRESS,
    "progress": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.DONE,
}

_FIELD_ALIASES = {
    "due": "due",
    "date": "due",
    "desc": "description",
    "description": "description",
    "project": "project",
    "priority": "priority",
    "prio": "priority",
    "tags": "tags",
    "tag": "tags",
    "recur": "recurrence",
    "recurrence": "recurrence",
    "status": "status",
    "title": "title",
}


class CommandError(ValueError):
    """Bad user input for a command; the message is shown as the reply."""


def _today(state: AppState) -> date:
    return state.task_store.today()


def _split_fields(text: str) -> tuple[str, dict[str, str]]:
    """
    "Buy milk | due=tomorrow | tags=home,errand" -> ("Buy milk", {"due": ..., "tags": ...})
    """
    head, *rest = text.split("|")
    fields: dict[str, str] = {}
    for chunk in rest:
        key, sep, value = chunk.partition("=")
        key = key.strip().lower()
        if not sep or key not in _FIELD_ALIASES:
            raise CommandError(f"Bad field '{chunk.strip()}'. Use name=value, e.g. due=tomorrow.")
        fields[_FIELD_ALIASES[key]] = value.strip()
    return head.strip(), fields


def _split_tags(raw: str) -> list[str]:
    return [t.strip() for t in raw.split(",") if t.strip()]


def _apply_fields(task: Task, fields: dict[str, str], today: date) -> Task:
    changes: dict[str, object] = {}
    for key, value in fields.items():
        if key == "due":
            res = parse_date(value, today=today)
            if not res.success:
                raise CommandError(res.error)
            changes["due_date"] = res.date
        elif key == "priority":
            if value.lower() not in _PRIORITIES:
                raise CommandError(f"Unknown priority '{value}'. Use low, medium, high or critical.")
            changes["priority"] = _PRIORITIES[value.lower()]
        elif key == "recurrence":
            if value.lower() not in _RECURRENCES:
                names = ", ".join(r.value.lower() for r in Recurrence)
                raise CommandError(f"Unknown recurrence '{value}'. Use one of: {names}.")
            changes["recurrence"] = _RECURRENCES[value.lower()]
        elif key == "status":
            if value.lower() not in _STATUSES:
                raise CommandError(f"Unknown status '{value}'. Use pending, inprogress or done.")
            changes["status"] = _STATUSES[value.lower()]
        elif key == "tags":
            changes["tags"] = _split_tags(value)
        elif key == "title":
            if not value:
                raise CommandError("Title cannot be empty.")
            changes["title"] = value
        else:
            changes[key] = value
    return replace(task, **changes)


def _resolve_ref(state: AppState, ref: str) -> str | None:
    """A listing position ("3") or a task id prefix (at least 4 chars)."""
    ref = ref.strip().lstrip("#")
    if ref.isdigit():
        n = int(ref)
        if 1 <= n <= len(state.last_listing):
            return state.last_listing[n - 1]
        return None
    if len(ref) < 4:
        return None
    hits = [t.id for t in state.task_store.all_tasks() if t.id.startswith(ref)]
    return hits[0] if len(hits) == 1 else None


def _resolve_refs(state: AppState, refs: list[str]) -> tuple[list[str], list[str]]:
    ids: list[str] = []
    unknown: list[str] = []
    for ref in refs:
        task_id = _resolve_ref(state, ref)
        if task_id is None:
            unknown.append(ref)
        else:
            ids.append(task_id)
    return ids, unknown


def _save_note(state: AppState) -> str:
    err = state.task_store.last_save_error
    if err is None:
        return ""
    return f"\nWarning: changes are kept in memory but could not be saved ({err})."


def _show_listing(state: AppState, tasks: list[Task], title: str) -> str:
    ordered = sort_tasks(tasks, state.sort.field, state.sort.ascending)
    state.last_listing = [t.id for t in ordered]
    table = format_table(ordered, today=_today(state), color=state.color)
    return f"{title} - sorted by {state.sort.describe()}\n{table}"


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> | due=<when> | project=<p> | priority=<p> | tags=a,b | recur=<rule> | desc=<text>
    """
    if not args:
        return "Usage: /add <title> | due=tomorrow | project=Home | priority=high | tags=a,b | recur=weekly"
    try:
        title, fields = _split_fields(" ".join(args))
        if not title:
            raise CommandError("Title cannot be empty.")
        today = _today(state)
        fields.setdefault("due", "")
        task = _apply_fields(Task(title=title, due_date=today), fields, today)
    except CommandError as e:
        return str(e)

    state.task_store.add(task)
    return f"Task added: {task.title} (due {task.due_date.isoformat()}, id {task.id[:8]})" + _save_note(state)


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list [all|pending|inprogress|done|overdue|today|week] [project=X] [tag=Y] [before=D] [after=D]
    """
    today = _today(state)
    kwargs: dict[str, object] = {"today": today}
    title = "All Tasks"

    for arg in args:
        key, sep, value = arg.partition("=")
        key = key.lower()
        if not sep:
            if key == "all":
                continue
            if key in _STATUSES:
                kwargs["status"] = _STATUSES[key]
                title = f"{_STATUSES[key].value} Tasks"
            elif key == "overdue":
                kwargs["overdue"] = True
                title = "Overdue Tasks"
            elif key == "today":
                kwargs["due_today"] = True
                title = "Tasks Due Today"
            elif key == "week":
                kwargs["due_this_week"] = True
                title = "Tasks Due This Week"
            else:
                return f"Unknown filter '{arg}'. Use /help for the /list syntax."
        elif key == "project":
            kwargs["project"] = value
            title = f"Tasks in Project '{value}'"
        elif key == "tag":
            kwargs["tag"] = value
            title = f"Tasks with Tag '{value}'"
        elif key in ("before", "after"):
            res = parse_date(value, today=today)
            if not res.success:
                return res.error
            kwargs["due_before" if key == "before" else "due_after"] = res.date
        else:
            return f"Unknown filter '{arg}'. Use /help for the /list syntax."

    tasks = filter_tasks(state.task_store.all_tasks(), **kwargs)  # type: ignore[arg-type]
    return _show_listing(state, tasks, title)


def cmd_search(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /search <text>"
    term = " ".join(args)
    return _show_listing(state, list(state.task_store.search(term)), f"Search Results for '{term}'")


def cmd_show(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /show <#|id>"
    task_id = _resolve_ref(state, args[0])
    task = state.task_store.find(task_id) if task_id else None
    if task is None:
        return f"No task matches '{args[0]}'."
    return format_task(task, today=_today(state), color=state.color)


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <#|id> | title=... | due=... | priority=... | status=... | tags=... | recur=...
    """
    if not args:
        return "Usage: /edit <#|id> | field=value | ..."
    try:
        ref, fields = _split_fields(" ".join(args))
        task_id = _resolve_ref(state, ref)
        task = state.task_store.find(task_id) if task_id else None
        if task is None:
            return f"No task matches '{ref}'."
        if not fields:
            return "Nothing to change. Example: /edit 2 | due=friday | priority=high"
        updated = _apply_fields(task, fields, _today(state))
    except CommandError as e:
        return str(e)

    state.task_store.update(updated)
    return f"Task updated: {updated.title}" + _save_note(state)


def _set_status(state: AppState, args: list[str], status: TaskStatus) -> str:
    if not args:
        return "Usage: /<command> <#|id> [<#|id> ...]"
    ids, unknown = _resolve_refs(state, args)
    changed = state.task_store.bulk_update_status(ids, status)
    msg = f"Marked {len(ids)} task(s) as {status.value}." if changed else "No tasks changed."
    if unknown:
        msg += f" Unknown: {', '.join(unknown)}."
    return msg + _save_note(state)


def cmd_start(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, TaskStatus.IN_PROGRESS)


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, TaskStatus.DONE)


def cmd_reopen(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, TaskStatus.PENDING)


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <#|id> [<#|id> ...]"
    ids, unknown = _resolve_refs(state, args)
    if len(args) == 1:
        ok = bool(ids) and state.task_store.delete(ids[0])
    else:
        ok = state.task_store.bulk_delete(ids)
    msg = f"Deleted {len(ids)} task(s). Use /undo to restore." if ok else "No tasks deleted."
    if unknown:
        msg += f" Unknown: {', '.join(unknown)}."
    return msg + _save_note(state)


def cmd_undo(state: AppState, args: list[str]) -> str:
    if not state.task_store.undo_delete():
        return "Nothing to undo."
    left = len(state.task_store.trash)
    return f"Restored the last deleted task ({left} more in trash)." + _save_note(state)


def cmd_projects(state: AppState, args: list[str]) -> str:
    projects = state.task_store.get_all_projects()
    return "Projects:\n" + "\n".join(f"  {p}" for p in projects) if projects else "No projects yet."


def cmd_tags(state: AppState, args: list[str]) -> str:
    tags = state.task_store.get_all_tags()
    return "Tags:\n" + "\n".join(f"  {t}" for t in tags) if tags else "No tags yet."


def cmd_stats(state: AppState, args: list[str]) -> str:
    return "Task statistics:\n" + format_statistics(state.task_store.get_task_statistics())


def cmd_sort(state: AppState, args: list[str]) -> str:
    """
    /sort              -> flip direction
    /sort <field>      -> sort by field (same field again flips direction)
    /sort <field> asc|desc
    """
    if not args:
        state.sort = state.sort.toggle()
        return f"Sort: {state.sort.describe()}"

    field = args[0].lower()
    if field not in SORT_FIELDS:
        return f"Unknown sort field '{field}'. Use one of: {', '.join(SORT_FIELDS)}."

    state.sort = state.sort.with_field(field)
    if len(args) > 1:
        direction = args[1].lower()
        if direction not in ("asc", "desc"):
            return "Direction must be asc or desc."
        if state.sort.ascending != (direction == "asc"):
            state.sort = state.sort.toggle()
    return f"Sort: {state.sort.describe()}"


def cmd_export(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    path = Path(" ".join(args)).expanduser() if args else Path(state.settings.export_path)
    if emit:
        emit(f"Exporting tasks to {path}...")
    try:
        n = export_csv(state.task_store.all_tasks(), path)
    except OSError as e:
        logger.exception("CSV export to %s failed", path)
        return f"Export failed: {e}"
    return f"Exported {n} task(s) to {path}."


def cmd_date(state: AppState, args: list[str]) -> str:
    """Preview how a date expression resolves."""
    res = parse_date(" ".join(args), today=_today(state))
    if not res.success or res.date is None:
        return f"Not a date: {res.error}"
    return f"{res.date.isoformat()} ({res.date.strftime('%A')})"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add Title | due=tomorrow | project=P | priority=high | tags=a,b | recur=weekly | desc=...",
    aliases=["a", "new"],
)
registry.register(
    "list",
    cmd_list,
    help_text="List tasks: /list [pending|inprogress|done|overdue|today|week] [project=P] [tag=T] [before=D] [after=D].",
    aliases=["ls", "l"],
)
registry.register("show", cmd_show, help_text="Show one task: /show <#|id>.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <#|id> | due=friday | priority=low | ...")
registry.register("start", cmd_start, help_text="Mark tasks in progress: /start <#|id> ...")
registry.register("done", cmd_done, help_text="Mark tasks done: /done <#|id> ...", aliases=["complete"])
registry.register("reopen", cmd_reopen, help_text="Mark tasks pending again: /reopen <#|id> ...")
registry.register("delete", cmd_delete, help_text="Delete tasks: /delete <#|id> ...", aliases=["del", "rm"])
registry.register("undo", cmd_undo, help_text="Restore the most recently deleted task.")
registry.register("search", cmd_search, help_text="Search title/project/description/tags: /search <text>.")
registry.register("projects", cmd_projects, help_text="List all projects.")
registry.register("tags", cmd_tags, help_text="List all tags.")
registry.register("stats", cmd_stats, help_text="Show task statistics.")
registry.register(
    "sort", cmd_sort, help_text="Change listing order: /sort [date|project|priority|title|status] [asc|desc]."
)
registry.register("export", cmd_export, help_text="Export tasks to CSV: /export [path].")
registry.register("date", cmd_date, help_text="Preview a date expression: /date next friday.")
