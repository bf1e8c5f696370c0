# tests/test_persistence.py

from __future__ import annotations

import json

from taskshelf.tasks.migrations import add_default_priority, migrate_task_records
from taskshelf.tasks.persistence import TaskPersistence
from taskshelf.tasks.task_models import Category

from .fakes import CATEGORIES_KEY, TASKS_KEY, FakeKVStore

LEGACY_TASK = {
    "id": "1700000000000",
    "title": "Buy milk",
    "categoryId": "c1",
    "deadline": None,
    "status": "todo",
    "createdAt": "2024-01-01T10:00:00.000Z",
}


def test_missing_records_load_empty(persistence: TaskPersistence, kv: FakeKVStore) -> None:
    assert persistence.load_categories() == []
    assert persistence.load_tasks() == []
    assert kv.writes == []


def test_corrupt_records_load_empty(persistence: TaskPersistence, kv: FakeKVStore) -> None:
    kv.data[CATEGORIES_KEY] = "{not json"
    kv.data[TASKS_KEY] = json.dumps({"not": "a list"})

    assert persistence.load_categories() == []
    assert persistence.load_tasks() == []


def test_read_failure_degrades_to_empty(persistence: TaskPersistence, kv: FakeKVStore) -> None:
    kv.put_json(CATEGORIES_KEY, [{"id": "c1", "name": "Home", "color": "#ef4444"}])
    kv.fail_reads = True

    assert persistence.load_categories() == []
    assert persistence.load_tasks() == []


def test_write_failure_is_swallowed(persistence: TaskPersistence, kv: FakeKVStore) -> None:
    kv.fail_writes = True
    ok = persistence.save_categories([Category(id="c1", name="Home", color="#ef4444")])
    assert ok is False
    assert CATEGORIES_KEY not in kv.data


def test_legacy_task_gets_normal_priority_and_one_write_back(
    persistence: TaskPersistence, kv: FakeKVStore
) -> None:
    kv.put_json(TASKS_KEY, [LEGACY_TASK, {**LEGACY_TASK, "id": "2", "priority": "hot"}])

    tasks = persistence.load_tasks()

    assert [t.priority for t in tasks] == ["normal", "hot"]
    assert kv.writes_for(TASKS_KEY) == 1
    stored = kv.load_json(TASKS_KEY)
    assert [r["priority"] for r in stored] == ["normal", "hot"]

    # Second load: already migrated -> no write.
    again = persistence.load_tasks()
    assert again == tasks
    assert kv.writes_for(TASKS_KEY) == 1


def test_up_to_date_tasks_are_not_rewritten(persistence: TaskPersistence, kv: FakeKVStore) -> None:
    kv.put_json(TASKS_KEY, [{**LEGACY_TASK, "priority": "low"}])
    persistence.load_tasks()
    assert kv.writes == []


def test_unknown_fields_survive_a_save_cycle(persistence: TaskPersistence, kv: FakeKVStore) -> None:
    kv.put_json(TASKS_KEY, [{**LEGACY_TASK, "priority": "low", "notes": "from v2"}])
    kv.put_json(CATEGORIES_KEY, [{"id": "c1", "name": "Home", "color": "#fff", "icon": "house"}])

    persistence.save_tasks(persistence.load_tasks())
    persistence.save_categories(persistence.load_categories())

    assert kv.load_json(TASKS_KEY)[0]["notes"] == "from v2"
    assert kv.load_json(CATEGORIES_KEY)[0]["icon"] == "house"


def test_non_object_entries_are_skipped(persistence: TaskPersistence, kv: FakeKVStore) -> None:
    kv.put_json(CATEGORIES_KEY, [42, {"id": "c1", "name": "Home", "color": "#fff"}])
    cats = persistence.load_categories()
    assert [c.id for c in cats] == ["c1"]


def test_namespace_controls_keys() -> None:
    kv = FakeKVStore()
    p = TaskPersistence(kv, namespace="other")
    p.save_categories([])
    p.save_tasks([])
    assert kv.keys() == ["other_categories", "other_tasks"]


def test_migration_is_idempotent() -> None:
    rec = dict(LEGACY_TASK)
    assert add_default_priority(rec) is True
    assert add_default_priority(rec) is False
    assert rec["priority"] == "normal"

    once, changed1 = migrate_task_records([LEGACY_TASK])
    twice, changed2 = migrate_task_records(once)
    assert changed1 is True
    assert changed2 is False
    assert once == twice
    # Input records are not modified in place.
    assert "priority" not in LEGACY_TASK
