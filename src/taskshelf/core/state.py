# src/taskshelf/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.backup import BackupCodec
from ..tasks.persistence import TaskPersistence
from ..tasks.task_store import TaskStore
from .ports import KeyValueStorage


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    storage: KeyValueStorage
    persistence: TaskPersistence
    store: TaskStore
    backup: BackupCodec
