# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskshelf.cli.bootstrap import create_initial_state
from taskshelf.core.state import AppState
from taskshelf.tasks.persistence import TaskPersistence
from taskshelf.tasks.task_store import TaskStore

from .fakes import FakeKVStore



@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskshelf-test",
        log_level="DEBUG",
        console_enabled=False,
        list_limit=50,
        data_dir=tmp_path / "data",
        storage_db_path=tmp_path / "data" / "storage.sqlite3",
        storage_namespace="todoapp",
        backup_dir=tmp_path / "data" / "backups",
    )


@pytest.fixture()
def kv() -> FakeKVStore:
    return FakeKVStore()


@pytest.fixture()
def persistence(kv: FakeKVStore) -> TaskPersistence:
    return TaskPersistence(kv, namespace="todoapp")


@pytest.fixture()
def store(persistence: TaskPersistence) -> TaskStore:
    return TaskStore(persistence)


@pytest.fixture()
def state(settings: SimpleNamespace, kv: FakeKVStore) -> AppState:
    """
    AppState wired with the in-memory key-value store.

    Everything above storage is the real implementation.
    """
    return create_initial_state(settings=settings, storage=kv)
