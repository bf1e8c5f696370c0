# src/taskshelf/tasks/migrations.py

from __future__ import annotations

"""
Additive schema migrations for stored task records.

Each migration takes one raw record (the JSON object as stored) and fills in
what older versions of the app did not write. Rules:
- additive only (never rename or drop a field),
- idempotent (running it on an up-to-date record changes nothing),
- returns True iff the record was modified.

Migrations run in list order on every load and on import.
"""

import logging
from collections.abc import Callable
from typing import Any

from .task_models import TaskPriority

logger = logging.getLogger(__name__)

Migration = Callable[[dict[str, Any]], bool]


def add_default_priority(record: dict[str, Any]) -> bool:
    """Tasks written before priorities existed get 'normal'."""
    if record.get("priority"):
        return False
    record["priority"] = TaskPriority.NORMAL.value
    return True


TASK_MIGRATIONS: list[tuple[str, Migration]] = [
    ("add_default_priority", add_default_priority),
]


def migrate_task_records(
    records: list[Any],
    migrations: list[tuple[str, Migration]] | None = None,
) -> tuple[list[Any], bool]:
    """
    Apply the migration chain to copies of `records`.

    Non-object entries are passed through untouched.
    Returns (migrated_records, changed).
    """
    chain = TASK_MIGRATIONS if migrations is None else migrations
    out: list[Any] = []
    changed = False
    counts: dict[str, int] = {}

    for raw in records:
        if not isinstance(raw, dict):
            out.append(raw)
            continue
        rec = dict(raw)
        for name, fn in chain:
            if fn(rec):
                counts[name] = counts.get(name, 0) + 1
                changed = True
        out.append(rec)

    for name, n in counts.items():
        logger.info("Task migration %s applied to %d record(s)", name, n)

    return out, changed
