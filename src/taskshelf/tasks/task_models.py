# src/taskshelf/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Transitions are unconstrained: any status can be set from any other,
    including reverting a done task back to todo.
    """

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @classmethod
    def is_valid(cls, raw: object) -> bool:
        return isinstance(raw, str) and raw in cls._value2member_map_


class TaskPriority(StrEnum):
    URGENT = "urgent"
    HOT = "hot"
    NORMAL = "normal"
    LOW = "low"

    @classmethod
    def is_valid(cls, raw: object) -> bool:
        return isinstance(raw, str) and raw in cls._value2member_map_


# Lower rank sorts first.
PRIORITY_RANK: dict[str, int] = {
    TaskPriority.URGENT: 0,
    TaskPriority.HOT: 1,
    TaskPriority.NORMAL: 2,
    TaskPriority.LOW: 3,
}

CATEGORY_COLORS: tuple[str, ...] = (
    "#ef4444",  # red
    "#f97316",  # orange
    "#eab308",  # yellow
    "#22c55e",  # green
    "#06b6d4",  # cyan
    "#3b82f6",  # blue
    "#8b5cf6",  # purple
    "#ec4899",  # pink
    "#f43f5e",  # rose
    "#14b8a6",  # teal
)


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a 'Z' suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_deadline(raw: str | date | None) -> str | None:
    """Empty input -> None; date objects -> 'YYYY-MM-DD'; strings are kept (stripped)."""
    if raw is None:
        return None
    if isinstance(raw, date):
        return raw.isoformat() if not isinstance(raw, datetime) else raw.date().isoformat()
    text = str(raw).strip()
    return text or None


@dataclass(slots=True)
class Category:
    id: str
    name: str
    color: str

    # Unknown fields found in stored/imported records, written back untouched.
    extra: dict[str, Any] = field(default_factory=dict)

    _FIELDS = ("id", "name", "color")

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Category:
        return cls(
            id=raw.get("id", ""),
            name=raw.get("name", ""),
            color=raw.get("color", ""),
            extra={k: v for k, v in raw.items() if k not in cls._FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update({"id": self.id, "name": self.name, "color": self.color})
        return out


@dataclass(slots=True)
class Task:
    """
    A single task.

    Values read from storage or a backup are kept exactly as stored (a
    legacy numeric id stays a number, a null title stays None) so records
    survive a load/save cycle unchanged; only absent keys get defaults.
    TaskStatus/TaskPriority define the recognized sets.
    """

    id: str
    title: str
    category_id: str
    deadline: str | None
    status: str
    priority: str
    created_at: str

    extra: dict[str, Any] = field(default_factory=dict)

    # Stored (camelCase) name -> attribute name.
    _WIRE = {
        "id": "id",
        "title": "title",
        "categoryId": "category_id",
        "deadline": "deadline",
        "status": "status",
        "priority": "priority",
        "createdAt": "created_at",
    }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        return cls(
            id=raw.get("id", ""),
            title=raw.get("title", ""),
            category_id=raw.get("categoryId", ""),
            deadline=raw.get("deadline"),
            status=raw.get("status", TaskStatus.TODO.value),
            priority=raw.get("priority", TaskPriority.NORMAL.value),
            created_at=raw.get("createdAt", ""),
            extra={k: v for k, v in raw.items() if k not in cls._WIRE},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update(
            {
                "id": self.id,
                "title": self.title,
                "categoryId": self.category_id,
                "deadline": self.deadline,
                "status": self.status,
                "priority": self.priority,
                "createdAt": self.created_at,
            }
        )
        return out


@dataclass(slots=True, frozen=True)
class FilterCriteria:
    """Active list filters. Empty string means "any"."""

    category: str = ""
    status: str = ""
    priority: str = ""
    search: str = ""

    def is_empty(self) -> bool:
        return not (self.category or self.status or self.priority or self.search)
