# tests/test_task_api.py

from __future__ import annotations

import random

import pytest

from taskshelf.core.state import AppState
from taskshelf.tasks.task_api import (
    create_category,
    create_task,
    edit_task,
    random_category_color,
    recolor_category,
    rename_category,
)
from taskshelf.tasks.task_models import CATEGORY_COLORS


def test_random_color_comes_from_palette() -> None:
    rng = random.Random(7)
    colors = {random_category_color(rng) for _ in range(50)}
    assert colors <= set(CATEGORY_COLORS)
    assert len(colors) > 1


def test_create_category_trims_and_colors(state: AppState) -> None:
    cat = create_category(state, "  Home  ")
    assert cat.name == "Home"
    assert cat.color in CATEGORY_COLORS

    with pytest.raises(ValueError):
        create_category(state, " ")


def test_rename_keeps_color_and_ignores_blank(state: AppState) -> None:
    cat = create_category(state, "Home", "#123456")

    renamed = rename_category(state, cat.id, " House ")
    assert (renamed.name, renamed.color) == ("House", "#123456")

    assert rename_category(state, cat.id, "  ").name == "House"
    assert rename_category(state, "missing", "X") is None


def test_recolor(state: AppState) -> None:
    cat = create_category(state, "Home", "#123456")
    assert recolor_category(state, cat.id, "#000000").color == "#000000"
    assert recolor_category(state, cat.id).color in CATEGORY_COLORS
    assert recolor_category(state, "missing") is None


def test_create_task_validation(state: AppState) -> None:
    with pytest.raises(ValueError, match="at least one category"):
        create_task(state, title="Buy milk", category_id="c1")

    cat = create_category(state, "Home")

    with pytest.raises(ValueError, match="title"):
        create_task(state, title="  ", category_id=cat.id)
    with pytest.raises(ValueError, match="select a category"):
        create_task(state, title="Buy milk", category_id="")

    task = create_task(state, title=" Buy milk ", category_id=cat.id, deadline="", priority="")
    assert (task.title, task.deadline, task.priority) == ("Buy milk", None, "normal")


def test_edit_task_writes_all_fields(state: AppState) -> None:
    home = create_category(state, "Home")
    work = create_category(state, "Work")
    task = create_task(state, title="Buy milk", category_id=home.id, deadline="2030-01-01", priority="hot")

    edited = edit_task(state, task.id, title="Report", category_id=work.id, deadline=None, priority="low")

    assert (edited.title, edited.category_id, edited.deadline, edited.priority) == (
        "Report",
        work.id,
        None,
        "low",
    )
    assert edited.status == task.status
    assert edit_task(state, "missing", title="X", category_id=work.id) is None
