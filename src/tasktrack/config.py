# src/tasktrack/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every value has a working default; nothing is required at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKTRACK"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    tasks_path: Path
    backup_path: Path
    export_path: Path

    # ---- Console ----
    default_sort_field: str
    default_sort_ascending: bool
    color: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasktrack")
        log_level = _env(_k("LOG_LEVEL"), "WARNING")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasktrack"))
        tasks_path = _env_path(_k("TASKS_PATH"), data_dir / "tasks.json")
        backup_path = _env_path(_k("BACKUP_PATH"), data_dir / "tasks_backup.json")
        export_path = _env_path(_k("EXPORT_PATH"), data_dir / "tasks_export.csv")

        default_sort_field = _env(_k("SORT_FIELD"), "date").strip().lower() or "date"
        default_sort_ascending = _env_bool(_k("SORT_ASCENDING"), True)

        # NO_COLOR (https://no-color.org) wins over our own switch.
        color = _env_bool(_k("COLOR"), True) and os.getenv("NO_COLOR") is None

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_path=tasks_path,
            backup_path=backup_path,
            export_path=export_path,
            default_sort_field=default_sort_field,
            default_sort_ascending=default_sort_ascending,
            color=color,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
