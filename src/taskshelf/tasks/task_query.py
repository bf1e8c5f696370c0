# src/taskshelf/tasks/task_query.py

from __future__ import annotations

"""
Derived views over store state.

Everything here is pure: inputs are never mutated, results are new lists,
and nothing is cached (the view is recomputed on every call).
"""

import math
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timezone

from .task_models import PRIORITY_RANK, Category, FilterCriteria, Task, TaskPriority, TaskStatus

_DEFAULT_RANK = PRIORITY_RANK[TaskPriority.NORMAL]


def priority_rank(priority: object) -> int:
    """urgent=0, hot=1, normal=2, low=3; anything else ranks as normal."""
    if not priority or not isinstance(priority, str):
        return _DEFAULT_RANK
    return PRIORITY_RANK.get(priority, _DEFAULT_RANK)


def _timestamp(raw: object) -> float:
    """ISO-8601 -> epoch seconds. Naive values are read as UTC; garbage -> 0."""
    if not raw or not isinstance(raw, str):
        return 0.0
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def parse_deadline(raw: object) -> date | None:
    if not raw or not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        return None


def _deadline_key(raw: object) -> tuple[int, float]:
    # Tasks with a deadline first, earliest first; unparseable ones after valid ones.
    if not raw:
        return (1, 0.0)
    d = parse_deadline(raw)
    return (0, float(d.toordinal()) if d is not None else math.inf)


def _sort_key(task: Task) -> tuple[int, float, tuple[int, float]]:
    return (priority_rank(task.priority), -_timestamp(task.created_at), _deadline_key(task.deadline))


def matches(task: Task, filters: FilterCriteria) -> bool:
    if filters.category and task.category_id != filters.category:
        return False
    if filters.status and task.status != filters.status:
        return False
    if filters.priority and task.priority != filters.priority:
        return False
    if filters.search and filters.search.lower() not in str(task.title or "").lower():
        return False
    return True


def sort_by_priority(tasks: Iterable[Task]) -> list[Task]:
    """Priority rank asc, then createdAt desc, then deadline (present first, earliest first)."""
    return sorted(tasks, key=_sort_key)


def derive_view(
    tasks: Sequence[Task],
    categories: Sequence[Category],
    filters: FilterCriteria,
) -> list[Task]:
    """
    Ordered list of tasks to display.

    `categories` is accepted so adapters can pass the whole store state;
    category filtering compares ids only, so dangling references still match.
    """
    return sort_by_priority(t for t in tasks if matches(t, filters))


def is_overdue(deadline: str | None, today: date | None = None) -> bool:
    d = parse_deadline(deadline)
    if d is None:
        return False
    return d < (today or date.today())


def is_task_overdue(task: Task, today: date | None = None) -> bool:
    return task.status != TaskStatus.DONE and is_overdue(task.deadline, today)


def completion_percentage(tasks: Sequence[Task]) -> int:
    """Share of done tasks, 0..100, rounded half up."""
    total = len(tasks)
    if total == 0:
        return 0
    done = sum(1 for t in tasks if t.status == TaskStatus.DONE)
    return math.floor(done * 100 / total + 0.5)
