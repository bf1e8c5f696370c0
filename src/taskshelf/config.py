# src/taskshelf/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is created on disk at import time.
- Storage keys keep the historical "todoapp" namespace unless overridden.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKSHELF"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


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

    # ---- Connector flags ----
    console_enabled: bool
    list_limit: int

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    storage_db_path: Path
    storage_namespace: str
    backup_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskshelf").strip() or "taskshelf"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        list_limit = max(1, _env_int(_k("LIST_LIMIT"), 200))

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskshelf"))
        storage_db_path = _env_path(_k("STORAGE_DB_PATH"), data_dir / "storage.sqlite3")
        storage_namespace = _env(_k("STORAGE_NAMESPACE"), "todoapp").strip() or "todoapp"
        backup_dir = _env_path(_k("BACKUP_DIR"), data_dir / "backups")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            list_limit=list_limit,
            data_dir=data_dir,
            storage_db_path=storage_db_path,
            storage_namespace=storage_namespace,
            backup_dir=backup_dir,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
