# src/taskshelf/tasks/task_api.py

from __future__ import annotations

import logging
import random
from datetime import date

from ..core.state import AppState
from .task_models import CATEGORY_COLORS, Category, Task, TaskPriority

logger = logging.getLogger(__name__)


def random_category_color(rng: random.Random | None = None) -> str:
    return (rng or random).choice(CATEGORY_COLORS)


def create_category(state: AppState, name: str, color: str | None = None) -> Category:
    """
    Convenience helper for UI adapters: trim + validate the name, pick a
    random palette color unless one is given.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Category name cannot be empty.")
    return state.store.add_category(name, color or random_category_color())


def rename_category(state: AppState, category_id: str, name: str) -> Category | None:
    """Rename, keeping the current color. Blank names are ignored."""
    name = (name or "").strip()
    current = state.store.get_category(category_id)
    if current is None or not name:
        return current
    return state.store.update_category(category_id, name, current.color)


def recolor_category(state: AppState, category_id: str, color: str | None = None) -> Category | None:
    current = state.store.get_category(category_id)
    if current is None:
        return None
    return state.store.update_category(category_id, current.name, color or random_category_color())


def create_task(
    state: AppState,
    *,
    title: str,
    category_id: str,
    deadline: str | date | None = None,
    priority: str = TaskPriority.NORMAL,
) -> Task:
    """Validate form-style input the way the task form does, then add the task."""
    title = (title or "").strip()
    if not title:
        raise ValueError("Task title cannot be empty.")
    if not state.store.categories:
        raise ValueError("Create at least one category before adding a task.")
    if not category_id:
        raise ValueError("Please select a category.")
    if state.store.get_category(category_id) is None:
        raise ValueError(f"Unknown category: {category_id}")
    return state.store.add_task(title, category_id, deadline, priority or TaskPriority.NORMAL)


def edit_task(
    state: AppState,
    task_id: str,
    *,
    title: str,
    category_id: str,
    deadline: str | date | None = None,
    priority: str = TaskPriority.NORMAL,
) -> Task | None:
    """Full edit-form submit: every editable field is written at once."""
    title = (title or "").strip()
    if not title:
        raise ValueError("Task title cannot be empty.")
    if not category_id:
        raise ValueError("Please select a category.")
    return state.store.update_task(
        task_id,
        title=title,
        category_id=category_id,
        deadline=deadline,
        priority=priority or TaskPriority.NORMAL,
    )
