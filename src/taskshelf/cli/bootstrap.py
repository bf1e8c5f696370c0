# src/taskshelf/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/persistence/store/backup).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueStorage
from ..core.state import AppState
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.backup import BackupCodec
from ..tasks.persistence import TaskPersistence
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.backup_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, storage: KeyValueStorage | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and storage) injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if storage is None:
        storage = SqliteKeyValueStore(settings.storage_db_path)

    persistence = TaskPersistence(storage, namespace=settings.storage_namespace)
    store = TaskStore(persistence)

    state = AppState(
        settings=settings,
        storage=storage,
        persistence=persistence,
        store=store,
        backup=BackupCodec(store, persistence),
    )
    logger.debug("AppState created namespace=%s", settings.storage_namespace)
    return state
