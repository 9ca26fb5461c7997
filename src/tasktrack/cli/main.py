# src/tasktrack/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (loading tasks and rolling over recurring
ones), then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)
    logger.info("Starting %s (tasks=%s)...", settings.app_name, settings.tasks_path)

    state = create_initial_state(settings=settings)

    try:
        run_console_loop(state)
    finally:
        if state.task_store.last_save_error is not None:
            logger.error("Exiting with unsaved changes: %s", state.task_store.last_save_error)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
