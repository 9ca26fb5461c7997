# src/tasktrack/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..cli.bootstrap import load_warning
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def acknowledge_load_warning(
    state: AppState,
    *,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> bool:
    """
    Show the load warning (if any) and block until the user presses Enter.

    Returns False if the user closed stdin instead of acknowledging.
    """
    warning = load_warning(state)
    if warning is None:
        return True

    logger.warning("Load warning shown to user: %s", state.task_store.load_report.source)
    write(warning)
    try:
        read("Press Enter to continue...")
    except (EOFError, KeyboardInterrupt):
        return False
    return True


def handle_line(state: AppState, line: str) -> str | None:
    """Run one console line through the command registry. Never raises."""
    try:
        reply = command_registry.handle(state, line, emit=print)
    except Exception:
        logger.exception("Command handler crashed: %r", line)
        return "Internal error while handling a command. Details are in the log file."

    if reply is None:
        return "Commands start with '/'. Use /help to list available commands."
    return reply


def run_console_loop(state: AppState) -> None:
    logger.info("Console started.")
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "tasktrack"))

    if not acknowledge_load_warning(state):
        logger.info("Console closed during load warning.")
        return

    stats = state.task_store.get_task_statistics()
    print(
        f"[{app_name}] {stats['Total']} tasks, {stats['Overdue']} overdue, "
        f"{stats['DueToday']} due today. Use /help for commands, /exit to quit.\n"
    )

    while True:
        try:
            user_input = input(f"{app_name}> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit", "/q"):
            logger.info("Console exit command received.")
            break

        print(handle_line(state, user_input))
        print()

    logger.info("Console finished.")
