# src/taskshelf/tasks/backup.py

from __future__ import annotations

"""
Backup export/import.

Document shape (JSON):
    {"categories": [...], "tasks": [...], "exportedAt": "<ISO-8601>"}

Export reads the durable records through TaskPersistence, not the live
store: if a previous write failed, the export reflects what is on disk.
Import validates the top-level shape only, runs the task migration chain,
then replaces durable and in-memory state in one step.
"""

import asyncio
import json
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..core.ports import TaskRepo
from .migrations import migrate_task_records
from .persistence import TaskPersistence
from .task_models import Category, Task, utc_now_iso

logger = logging.getLogger(__name__)


class BackupValidationError(ValueError):
    """The document is not a usable backup; nothing was changed."""


@dataclass(slots=True, frozen=True)
class BackupSummary:
    categories: int
    tasks: int


def backup_filename(now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"todo-backup-{now_ms}.json"


class BackupCodec:
    def __init__(self, store: TaskRepo, persistence: TaskPersistence) -> None:
        self._store = store
        self._persistence = persistence

    # ---- export ----

    def export_document(self) -> dict[str, Any]:
        return {
            "categories": [c.to_dict() for c in self._persistence.load_categories()],
            "tasks": [t.to_dict() for t in self._persistence.load_tasks()],
            "exportedAt": utc_now_iso(),
        }

    @staticmethod
    def dumps(document: Mapping[str, Any]) -> str:
        return json.dumps(document, ensure_ascii=False, indent=2)

    def export_to_file(self, directory: str | Path) -> Path:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / backup_filename()

        document = self.export_document()
        path.write_text(self.dumps(document), "utf-8")
        logger.info(
            "Exported backup to %s (categories=%d tasks=%d)",
            path,
            len(document["categories"]),
            len(document["tasks"]),
        )
        return path

    # ---- import ----

    @staticmethod
    def _parse(document: Mapping[str, Any] | str | bytes) -> Mapping[str, Any]:
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except ValueError as e:
                raise BackupValidationError(f"backup is not valid JSON: {e}") from e

        if not isinstance(document, Mapping):
            raise BackupValidationError("backup must be a JSON object")

        categories = document.get("categories")
        tasks = document.get("tasks")
        if not isinstance(categories, list):
            raise BackupValidationError("backup is missing a 'categories' list")
        if not isinstance(tasks, list):
            raise BackupValidationError("backup is missing a 'tasks' list")
        return document

    def import_document(self, document: Mapping[str, Any] | str | bytes) -> BackupSummary:
        """
        Replace all state with the backup's contents.

        Raises BackupValidationError (store and storage untouched) when the
        document is unparseable or lacks either list.
        """
        doc = self._parse(document)

        migrated_tasks, _ = migrate_task_records(list(doc["tasks"]))

        categories: list[Category] = []
        tasks: list[Task] = []
        for raw in doc["categories"]:
            if isinstance(raw, dict):
                categories.append(Category.from_dict(raw))
            else:
                logger.warning("Skipping non-object category entry in backup: %r", raw)
        for raw in migrated_tasks:
            if isinstance(raw, dict):
                tasks.append(Task.from_dict(raw))
            else:
                logger.warning("Skipping non-object task entry in backup: %r", raw)

        self._store.replace_all(categories, tasks)
        logger.info("Imported backup (categories=%d tasks=%d)", len(categories), len(tasks))
        return BackupSummary(categories=len(categories), tasks=len(tasks))

    async def import_file(self, path: str | Path) -> BackupSummary:
        """
        Read a backup file without blocking the loop, then import it.

        The read is the only await; validation and replacement run to
        completion afterwards, so no other mutation can interleave.
        """
        path = Path(path)
        try:
            raw = await asyncio.to_thread(path.read_text, "utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BackupValidationError(f"cannot read backup file {path}: {e}") from e
        return self.import_document(raw)
