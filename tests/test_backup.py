# tests/test_backup.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskshelf.core.state import AppState
from taskshelf.tasks.backup import BackupValidationError, backup_filename

from .fakes import CATEGORIES_KEY, TASKS_KEY, FakeKVStore


def _seed(state: AppState) -> None:
    home = state.store.add_category("Home", "#ef4444")
    work = state.store.add_category("Work", "#3b82f6")
    state.store.add_task("Buy milk", home.id, "2030-01-01", "hot")
    t = state.store.add_task("Write report", work.id)
    state.store.update_task_status(t.id, "done")


def test_export_document_shape(state: AppState) -> None:
    _seed(state)

    doc = state.backup.export_document()

    assert set(doc) == {"categories", "tasks", "exportedAt"}
    assert [c["name"] for c in doc["categories"]] == ["Home", "Work"]
    assert {t["title"] for t in doc["tasks"]} == {"Buy milk", "Write report"}
    assert doc["exportedAt"].endswith("Z")
    assert json.loads(state.backup.dumps(doc)) == doc


def test_export_then_import_round_trip(state: AppState) -> None:
    _seed(state)
    categories_before = state.store.categories
    tasks_before = state.store.tasks

    summary = state.backup.import_document(state.backup.dumps(state.backup.export_document()))

    assert (summary.categories, summary.tasks) == (2, 2)
    assert state.store.categories == categories_before
    assert state.store.tasks == tasks_before


def test_import_replaces_memory_and_storage(state: AppState, kv: FakeKVStore) -> None:
    _seed(state)
    doc = {
        "categories": [{"id": "c9", "name": "Garden", "color": "#22c55e"}],
        "tasks": [
            {
                "id": "t9",
                "title": "Water plants",
                "categoryId": "c9",
                "deadline": None,
                "status": "todo",
                "priority": "low",
                "createdAt": "2024-01-01T00:00:00.000Z",
            }
        ],
        "exportedAt": "2024-01-02T00:00:00.000Z",
        "app": "ignored",
    }

    state.backup.import_document(doc)

    assert [c.id for c in state.store.categories] == ["c9"]
    assert [t.id for t in state.store.tasks] == ["t9"]
    assert kv.load_json(CATEGORIES_KEY) == doc["categories"]
    assert kv.load_json(TASKS_KEY) == doc["tasks"]


def test_import_migrates_legacy_tasks(state: AppState, kv: FakeKVStore) -> None:
    doc = {
        "categories": [{"id": "c1", "name": "Home", "color": "#fff"}],
        "tasks": [{"id": "t1", "title": "Old", "categoryId": "c1", "status": "todo", "createdAt": ""}],
    }

    state.backup.import_document(doc)

    assert state.store.tasks[0].priority == "normal"
    assert kv.load_json(TASKS_KEY)[0]["priority"] == "normal"
    # The caller's document is left as given.
    assert "priority" not in doc["tasks"][0]


@pytest.mark.parametrize(
    "document",
    [
        {"tasks": []},
        {"categories": {"id": "c1"}, "tasks": []},
        {"categories": [], "tasks": "nope"},
        {"categories": []},
        [1, 2, 3],
        "{broken json",
        "null",
    ],
)
def test_invalid_documents_leave_state_untouched(state: AppState, kv: FakeKVStore, document) -> None:
    _seed(state)
    categories_before = state.store.categories
    tasks_before = state.store.tasks
    stored_before = dict(kv.data)
    writes_before = len(kv.writes)

    with pytest.raises(BackupValidationError):
        state.backup.import_document(document)

    assert state.store.categories == categories_before
    assert state.store.tasks == tasks_before
    assert kv.data == stored_before
    assert len(kv.writes) == writes_before


def test_export_reads_durable_state_not_memory(state: AppState, kv: FakeKVStore) -> None:
    home = state.store.add_category("Home", "#ef4444")
    kv.fail_writes = True
    state.store.add_task("Unsaved", home.id)
    kv.fail_writes = False

    doc = state.backup.export_document()

    assert doc["tasks"] == []
    assert len(state.store.tasks) == 1


def test_export_to_file(state: AppState, tmp_path: Path) -> None:
    _seed(state)

    path = state.backup.export_to_file(tmp_path / "backups")

    assert path.parent == tmp_path / "backups"
    assert path.name.startswith("todo-backup-") and path.suffix == ".json"
    data = json.loads(path.read_text("utf-8"))
    assert len(data["tasks"]) == 2


def test_backup_filename() -> None:
    assert backup_filename(1700000000123) == "todo-backup-1700000000123.json"


@pytest.mark.asyncio
async def test_import_file_restores_state(state: AppState, tmp_path: Path) -> None:
    _seed(state)
    path = state.backup.export_to_file(tmp_path)
    tasks_before = state.store.tasks

    state.store.delete_task(tasks_before[0].id)
    assert len(state.store.tasks) == 1

    summary = await state.backup.import_file(path)

    assert summary.tasks == 2
    assert state.store.tasks == tasks_before


@pytest.mark.asyncio
async def test_import_file_missing_is_a_validation_error(state: AppState, tmp_path: Path) -> None:
    with pytest.raises(BackupValidationError):
        await state.backup.import_file(tmp_path / "missing.json")


def test_import_keeps_record_values_verbatim(state: AppState, kv: FakeKVStore) -> None:
    doc = {
        "categories": [{"id": 1700000000000, "name": "Home", "color": "#ef4444"}],
        "tasks": [
            {
                "id": 1700000000001,
                "title": None,
                "categoryId": 1700000000000,
                "deadline": None,
                "status": "todo",
                "priority": "normal",
                "createdAt": "2024-01-01T00:00:00.000Z",
            }
        ],
    }

    state.backup.import_document(state.backup.dumps(doc))
    out = state.backup.export_document()

    assert out["categories"] == doc["categories"]
    assert out["tasks"] == doc["tasks"]
    assert kv.load_json(TASKS_KEY) == doc["tasks"]
    assert state.store.tasks[0].title is None
