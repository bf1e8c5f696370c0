# src/taskshelf/tasks/persistence.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from ..core.ports import KeyValueStorage
from .migrations import migrate_task_records
from .task_models import Category, Task

logger = logging.getLogger(__name__)


class TaskPersistence:
    """
    Reads/writes the two durable records (categories, tasks).

    Failure policy:
    - reads never raise: absent, corrupt or unreadable records load as []
    - writes never raise: failures are logged, nothing is rolled back or retried

    Task records are migrated on read; if any record needed migration the
    full migrated list is written back once.
    """

    def __init__(self, storage: KeyValueStorage, *, namespace: str = "todoapp") -> None:
        self._storage = storage
        self._namespace = namespace
        self.categories_key = f"{namespace}_categories"
        self.tasks_key = f"{namespace}_tasks"

    # ---- low-level helpers ----

    def _read_list(self, key: str) -> list[Any]:
        try:
            raw = self._storage.get_item(key)
        except Exception:
            logger.exception("Failed to read %s from storage", key)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.exception("Stored record %s is not valid JSON; treating as empty", key)
            return []

        if not isinstance(data, list):
            logger.error("Stored record %s is not a list (got %s); treating as empty", key, type(data).__name__)
            return []
        return data

    def _write_list(self, key: str, records: list[dict[str, Any]]) -> bool:
        try:
            payload = json.dumps(records, ensure_ascii=False)
            self._storage.set_item(key, payload)
        except Exception:
            logger.exception("Failed to save %s to storage (%d records)", key, len(records))
            return False
        return True

    @staticmethod
    def _objects_only(key: str, records: Iterable[Any]) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        for raw in records:
            if isinstance(raw, dict):
                out.append(raw)
            else:
                logger.warning("Skipping non-object entry in %s: %r", key, raw)
        return out

    # ---- public API ----

    def load_categories(self) -> list[Category]:
        records = self._objects_only(self.categories_key, self._read_list(self.categories_key))
        return [Category.from_dict(r) for r in records]

    def save_categories(self, categories: Iterable[Category]) -> bool:
        return self._write_list(self.categories_key, [c.to_dict() for c in categories])

    def load_tasks(self) -> list[Task]:
        stored = self._read_list(self.tasks_key)
        migrated, changed = migrate_task_records(stored)
        tasks = [Task.from_dict(r) for r in self._objects_only(self.tasks_key, migrated)]
        if changed:
            logger.info("Writing back %d migrated task(s)", len(tasks))
            self.save_tasks(tasks)
        return tasks

    def save_tasks(self, tasks: Iterable[Task]) -> bool:
        return self._write_list(self.tasks_key, [t.to_dict() for t in tasks])
