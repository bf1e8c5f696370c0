# src/taskshelf/tasks/task_store.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import date
from typing import Any

from .persistence import TaskPersistence
from .task_models import (
    Category,
    FilterCriteria,
    Task,
    TaskPriority,
    TaskStatus,
    normalize_deadline,
    utc_now_iso,
)
from .task_query import derive_view

logger = logging.getLogger(__name__)

# Fields update_task() may change; id and created_at are immutable.
_MUTABLE_TASK_FIELDS = frozenset({"title", "category_id", "deadline", "priority", "status"})


class TaskStore:
    """
    In-memory authoritative copy of categories and tasks.

    - hydrated once from TaskPersistence at construction
    - every successful mutation writes the full affected collection(s) back
      (snapshot writes, no diffs)
    - readers get copies; internal records are only changed by index lookup
      + replace, never through references handed out to callers
    - filter criteria live here too but are never persisted
    """

    def __init__(
        self,
        persistence: TaskPersistence,
        *,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self._persistence = persistence
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._clock = clock

        self._categories: list[Category] = persistence.load_categories()
        self._tasks: list[Task] = persistence.load_tasks()
        self._filters = FilterCriteria()

        logger.info(
            "TaskStore ready categories=%d tasks=%d",
            len(self._categories),
            len(self._tasks),
        )

    # ---- low-level helpers ----

    def _new_id(self, taken: set[str]) -> str:
        while True:
            new_id = self._id_factory()
            if new_id and new_id not in taken:
                return new_id
            logger.debug("Generated id collided, retrying: %s", new_id)

    def _category_index(self, category_id: str) -> int | None:
        for i, c in enumerate(self._categories):
            if c.id == category_id:
                return i
        return None

    def _task_index(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    @staticmethod
    def _copy_task(task: Task) -> Task:
        return replace(task, extra=dict(task.extra))

    @staticmethod
    def _copy_category(category: Category) -> Category:
        return replace(category, extra=dict(category.extra))

    def _persist_categories(self) -> None:
        self._persistence.save_categories(self._categories)

    def _persist_tasks(self) -> None:
        self._persistence.save_tasks(self._tasks)

    # ---- readers ----

    @property
    def categories(self) -> list[Category]:
        return [self._copy_category(c) for c in self._categories]

    @property
    def tasks(self) -> list[Task]:
        return [self._copy_task(t) for t in self._tasks]

    @property
    def filters(self) -> FilterCriteria:
        return self._filters

    def get_category(self, category_id: str) -> Category | None:
        idx = self._category_index(category_id)
        return None if idx is None else self._copy_category(self._categories[idx])

    def get_task(self, task_id: str) -> Task | None:
        idx = self._task_index(task_id)
        return None if idx is None else self._copy_task(self._tasks[idx])

    def view(self) -> list[Task]:
        """Filtered + sorted tasks for display, using the active filters."""
        return derive_view(self.tasks, self.categories, self._filters)

    # ---- categories ----

    def add_category(self, name: str, color: str) -> Category:
        if not name or not name.strip():
            raise ValueError("category name is required")

        category = Category(
            id=self._new_id({c.id for c in self._categories}),
            name=name,
            color=color,
        )
        self._categories.append(category)
        self._persist_categories()
        logger.debug("Category added id=%s name=%s", category.id, name)
        return self._copy_category(category)

    def update_category(self, category_id: str, name: str, color: str) -> Category | None:
        idx = self._category_index(category_id)
        if idx is None:
            return None

        updated = replace(self._categories[idx], name=name, color=color)
        self._categories[idx] = updated
        self._persist_categories()
        return self._copy_category(updated)

    def delete_category(self, category_id: str) -> None:
        """Remove a category and every task filed under it."""
        idx = self._category_index(category_id)
        if idx is None:
            return

        del self._categories[idx]
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.category_id != category_id]

        self._persist_categories()
        self._persist_tasks()
        logger.debug(
            "Category deleted id=%s cascaded_tasks=%d",
            category_id,
            before - len(self._tasks),
        )

    # ---- tasks ----

    def add_task(
        self,
        title: str,
        category_id: str,
        deadline: str | date | None = None,
        priority: str = TaskPriority.NORMAL,
    ) -> Task:
        if not title or not title.strip():
            raise ValueError("task title is required")
        if not category_id or self._category_index(category_id) is None:
            raise ValueError(f"unknown category: {category_id!r}")
        if not TaskPriority.is_valid(priority):
            raise ValueError(f"unknown priority: {priority!r}")

        task = Task(
            id=self._new_id({t.id for t in self._tasks}),
            title=title,
            category_id=category_id,
            deadline=normalize_deadline(deadline),
            status=TaskStatus.TODO.value,
            priority=str(priority),
            created_at=self._clock(),
        )
        self._tasks.append(task)
        self._persist_tasks()
        logger.debug("Task added id=%s category=%s priority=%s", task.id, category_id, priority)
        return self._copy_task(task)

    def update_task(self, task_id: str, **fields: Any) -> Task | None:
        """
        Merge `fields` into the task (last write wins per field).

        Unknown/immutable field names or an empty title raise ValueError
        before anything changes. An unrecognized status or priority value is
        dropped from the merge, the same way update_task_status() ignores it;
        if nothing is left to change, nothing is written.
        """
        unknown = set(fields) - _MUTABLE_TASK_FIELDS
        if unknown:
            raise ValueError(f"cannot update task field(s): {', '.join(sorted(unknown))}")
        if "title" in fields and (not fields["title"] or not str(fields["title"]).strip()):
            raise ValueError("task title is required")

        idx = self._task_index(task_id)
        if idx is None:
            return None

        changes = dict(fields)
        for key, enum_cls in (("status", TaskStatus), ("priority", TaskPriority)):
            if key not in changes:
                continue
            if enum_cls.is_valid(changes[key]):
                changes[key] = str(changes[key])
            else:
                logger.debug("Ignoring unknown %s %r for task %s", key, changes.pop(key), task_id)
        if "deadline" in changes:
            changes["deadline"] = normalize_deadline(changes["deadline"])

        if not changes:
            return self._copy_task(self._tasks[idx])

        updated = replace(self._tasks[idx], **changes)
        self._tasks[idx] = updated
        self._persist_tasks()
        return self._copy_task(updated)

    def delete_task(self, task_id: str) -> None:
        idx = self._task_index(task_id)
        if idx is None:
            return
        del self._tasks[idx]
        self._persist_tasks()

    def update_task_status(self, task_id: str, new_status: str) -> Task | None:
        """
        Move a task to `new_status`.

        An unrecognized status is ignored (no change, no write); the current
        task is still returned when it exists.
        """
        idx = self._task_index(task_id)
        if idx is None:
            return None

        if not TaskStatus.is_valid(new_status):
            logger.debug("Ignoring unknown status %r for task %s", new_status, task_id)
            return self._copy_task(self._tasks[idx])

        updated = replace(self._tasks[idx], status=str(new_status))
        self._tasks[idx] = updated
        self._persist_tasks()
        return self._copy_task(updated)

    # ---- filters ----

    def set_filters(self, category: str = "", status: str = "", search: str = "", priority: str = "") -> None:
        self._filters = FilterCriteria(
            category=category or "",
            status=status or "",
            priority=priority or "",
            search=search or "",
        )

    def set_search(self, search: str) -> None:
        self._filters = replace(self._filters, search=search or "")

    # ---- bulk ----

    def replace_all(self, categories: list[Category], tasks: list[Task]) -> None:
        """Swap both collections wholesale (import) and persist them."""
        self._persistence.save_categories(categories)
        self._persistence.save_tasks(tasks)
        self._categories = [self._copy_category(c) for c in categories]
        self._tasks = [self._copy_task(t) for t in tasks]
        logger.info(
            "TaskStore replaced categories=%d tasks=%d",
            len(self._categories),
            len(self._tasks),
        )
