# src/tasktrack/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _ConsoleNoiseFilter(logging.Filter):
    """Only tasktrack records reach the console; other loggers need ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.startswith("tasktrack.") or record.levelno >= logging.ERROR


def setup_logging(*, log_dir: str | Path, console_level: int = logging.WARNING) -> None:
    """
    stderr gets console_level and up (kept quiet so it does not interleave
    with the REPL); <log_dir>/tasktrack.log gets everything.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleNoiseFilter())

    logging.basicConfig(
        level=logging.DEBUG,
        format=_FORMAT,
        handlers=[console, logging.FileHandler(log_dir / "tasktrack.log", encoding="utf-8")],
        force=True,
    )
    logging.captureWarnings(True)
