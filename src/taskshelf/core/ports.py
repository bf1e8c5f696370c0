# src/taskshelf/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage swappable and makes testing easier (tests use an
in-memory key-value store that can simulate write failures).
"""

from typing import Any, Protocol


class KeyValueStorage(Protocol):
    """Durable string -> string storage (local-storage semantics)."""

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...
    def keys(self) -> list[str]: ...


class TaskRepo(Protocol):
    """What the backup codec needs from the domain store: a wholesale swap."""

    def replace_all(self, categories: list[Any], tasks: list[Any]) -> None: ...
