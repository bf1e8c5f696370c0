# src/taskshelf/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
import shlex
from collections.abc import Callable
from pathlib import Path
from typing import cast

from ..core.state import AppState
from ..tasks.backup import BackupValidationError
from ..tasks.task_api import create_category, create_task, edit_task, recolor_category, rename_category
from ..tasks.task_models import Category, Task, TaskPriority, TaskStatus
from ..tasks.task_query import completion_percentage, is_task_overdue

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

PRIORITY_ICONS = {
    TaskPriority.LOW: "📍",
    TaskPriority.NORMAL: "➖",
    TaskPriority.HOT: "🔥",
    TaskPriority.URGENT: "⚠️",
}
STATUS_MARKS = {
    TaskStatus.TODO: "[ ]",
    TaskStatus.IN_PROGRESS: "[~]",
    TaskStatus.DONE: "[x]",
}
SHORT_ID = 8


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like '/command args "quoted arg"'.
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- lookup / formatting helpers ----


def _find_category(state: AppState, ref: str) -> Category | None:
    """Match by exact id, id prefix, or case-insensitive name."""
    cats = state.store.categories
    for c in cats:
        if c.id == ref:
            return c
    by_prefix = [c for c in cats if str(c.id).startswith(ref)]
    if len(by_prefix) == 1:
        return by_prefix[0]
    by_name = [c for c in cats if str(c.name or "").lower() == ref.lower()]
    if len(by_name) == 1:
        return by_name[0]
    return None


def _find_task(state: AppState, ref: str) -> Task | None:
    tasks = state.store.tasks
    for t in tasks:
        if t.id == ref:
            return t
    by_prefix = [t for t in tasks if str(t.id).startswith(ref)]
    return by_prefix[0] if len(by_prefix) == 1 else None


def _split_options(args: list[str], keys: set[str]) -> tuple[dict[str, str], list[str]]:
    """Pull 'key=value' / 'key:value' tokens out of args; the rest is free text."""
    opts: dict[str, str] = {}
    rest: list[str] = []
    for a in args:
        for sep in ("=", ":"):
            key, found, value = a.partition(sep)
            if found and key.lower() in keys:
                opts[key.lower()] = value
                break
        else:
            rest.append(a)
    return opts, rest


def format_task_line(task: Task, category: Category | None) -> str:
    mark = STATUS_MARKS.get(task.status, "[?]")
    icon = PRIORITY_ICONS.get(task.priority, PRIORITY_ICONS[TaskPriority.NORMAL])
    cat = f" ({category.name})" if category else ""
    due = ""
    if task.deadline:
        due = f" due {task.deadline}"
        if is_task_overdue(task):
            due += " (overdue)"
    return f"[{str(task.id)[:SHORT_ID]}] {mark} {icon} {task.title}{cat}{due}"


def render_view(state: AppState, limit: int | None = None) -> str:
    tasks = state.store.view()
    if not tasks:
        return "No tasks match the current filters."
    cats = {c.id: c for c in state.store.categories}
    shown = tasks if limit is None else tasks[:limit]
    lines = [format_task_line(t, cats.get(t.category_id)) for t in shown]
    if len(shown) < len(tasks):
        lines.append(f"... {len(tasks) - len(shown)} more")
    return "\n".join(lines)


def _after_mutation(state: AppState, message: str) -> str:
    # Re-derive the list after every change, like the UI re-render.
    return f"{message}\n{render_view(state, getattr(state.settings, 'list_limit', None))}"


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_cats(state: AppState, args: list[str]) -> str:
    cats = state.store.categories
    if not cats:
        return "No categories. Create one with /cat add <name>."
    counts: dict[str, int] = {}
    for t in state.store.tasks:
        counts[t.category_id] = counts.get(t.category_id, 0) + 1
    lines = ["Categories:"]
    for c in cats:
        lines.append(f"  [{str(c.id)[:SHORT_ID]}] {c.name} {c.color} ({counts.get(c.id, 0)} tasks)")
    return "\n".join(lines)


def cmd_cat(state: AppState, args: list[str]) -> str:
    """
    /cat add <name>
    /cat edit <category> <new name>
    /cat color <category> [#hex]
    /cat del <category>
    """
    usage = "Usage: /cat add <name> | /cat edit <cat> <name> | /cat color <cat> [#hex] | /cat del <cat>"
    if not args:
        return usage

    sub = args[0].lower()
    rest = args[1:]

    if sub == "add":
        try:
            c = create_category(state, " ".join(rest))
        except ValueError as e:
            return str(e)
        return f"Category added: {c.name} [{str(c.id)[:SHORT_ID]}] {c.color}"

    if sub in ("edit", "color", "del", "delete", "rm") and not rest:
        return usage

    if sub in ("edit", "color", "del", "delete", "rm"):
        cat = _find_category(state, rest[0])
        if cat is None:
            return f"Category not found: {rest[0]}"

        if sub == "edit":
            updated = rename_category(state, cat.id, " ".join(rest[1:]))
            if updated is None or updated.name == cat.name:
                return "Category unchanged (name cannot be empty)."
            return f"Category renamed: {cat.name} -> {updated.name}"

        if sub == "color":
            updated = recolor_category(state, cat.id, rest[1] if len(rest) > 1 else None)
            return f"Category {cat.name} color: {updated.color if updated else cat.color}"

        n_tasks = sum(1 for t in state.store.tasks if t.category_id == cat.id)
        state.store.delete_category(cat.id)
        return _after_mutation(state, f"Category deleted: {cat.name} (and {n_tasks} task(s))")

    return usage


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <category> <title...> [due=YYYY-MM-DD] [p=urgent|hot|normal|low]
    """
    opts, rest = _split_options(args, {"due", "p", "priority"})
    if len(rest) < 2:
        return "Usage: /add <category> <title> [due=YYYY-MM-DD] [p=urgent|hot|normal|low]"

    cat = _find_category(state, rest[0])
    if cat is None:
        return f"Category not found: {rest[0]}"

    priority = opts.get("p") or opts.get("priority") or TaskPriority.NORMAL
    try:
        task = create_task(
            state,
            title=" ".join(rest[1:]),
            category_id=cat.id,
            deadline=opts.get("due"),
            priority=priority.lower(),
        )
    except ValueError as e:
        return str(e)
    return _after_mutation(state, f"Task added [{str(task.id)[:SHORT_ID]}]: {task.title}")


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <task> [title=...] [cat=...] [due=YYYY-MM-DD|none] [p=...]
    Fields not given keep their current value.
    """
    if not args:
        return "Usage: /edit <task> [title=...] [cat=...] [due=YYYY-MM-DD|none] [p=...]"
    task = _find_task(state, args[0])
    if task is None:
        return f"Task not found: {args[0]}"

    opts, rest = _split_options(args[1:], {"title", "cat", "due", "p", "priority"})
    title = opts.get("title") or (" ".join(rest) if rest else task.title)

    category_id = task.category_id
    if "cat" in opts:
        cat = _find_category(state, opts["cat"])
        if cat is None:
            return f"Category not found: {opts['cat']}"
        category_id = cat.id

    deadline = task.deadline
    if "due" in opts:
        deadline = None if opts["due"].lower() in ("", "none", "-") else opts["due"]

    priority = task.priority
    if "p" in opts or "priority" in opts:
        priority = (opts.get("p") or opts.get("priority") or "").lower()
        if not TaskPriority.is_valid(priority):
            return f"unknown priority: {priority!r}"
    try:
        updated = edit_task(
            state,
            task.id,
            title=title,
            category_id=category_id,
            deadline=deadline,
            priority=priority,
        )
    except ValueError as e:
        return str(e)
    if updated is None:
        return f"Task not found: {args[0]}"
    return _after_mutation(state, f"Task updated [{str(updated.id)[:SHORT_ID]}]: {updated.title}")


def cmd_status(state: AppState, args: list[str]) -> str:
    statuses = " | ".join(s.value for s in TaskStatus)
    if len(args) < 2:
        return f"Usage: /status <task> {statuses}"
    task = _find_task(state, args[0])
    if task is None:
        return f"Task not found: {args[0]}"

    new_status = args[1].lower()
    if not TaskStatus.is_valid(new_status):
        return f"Unknown status: {args[1]}. Use one of: {statuses}"
    state.store.update_task_status(task.id, new_status)
    return _after_mutation(state, f"Task [{str(task.id)[:SHORT_ID]}] -> {new_status}")


def cmd_del(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /del <task>"
    task = _find_task(state, args[0])
    if task is None:
        return f"Task not found: {args[0]}"
    state.store.delete_task(task.id)
    return _after_mutation(state, f"Task deleted: {task.title}")


def cmd_list(state: AppState, args: list[str]) -> str:
    f = state.store.filters
    header = "Tasks" if f.is_empty() else (
        f"Tasks (category={f.category or '*'} status={f.status or '*'} "
        f"priority={f.priority or '*'} search={f.search or '*'})"
    )
    return f"{header}:\n{render_view(state, getattr(state.settings, 'list_limit', None))}"


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter [cat=...] [status=...] [p=...] [search=...]
    /filter clear
    Every call replaces all criteria; omitted ones become "any".
    """
    if args and args[0].lower() in ("clear", "reset", "off"):
        state.store.set_filters("", "", "", "")
        return cmd_list(state, [])

    opts, rest = _split_options(args, {"cat", "status", "p", "priority", "search"})
    if rest:
        return "Usage: /filter [cat=...] [status=...] [p=...] [search=...] | /filter clear"

    category_id = ""
    if opts.get("cat"):
        cat = _find_category(state, opts["cat"])
        if cat is None:
            return f"Category not found: {opts['cat']}"
        category_id = cat.id

    status = (opts.get("status") or "").lower()
    if status and not TaskStatus.is_valid(status):
        return f"Unknown status: {status}"
    priority = (opts.get("p") or opts.get("priority") or "").lower()
    if priority and not TaskPriority.is_valid(priority):
        return f"Unknown priority: {priority}"

    state.store.set_filters(category_id, status, opts.get("search", ""), priority)
    return cmd_list(state, [])


def cmd_search(state: AppState, args: list[str]) -> str:
    state.store.set_search(" ".join(args))
    return cmd_list(state, [])


def cmd_progress(state: AppState, args: list[str]) -> str:
    tasks = state.store.tasks
    done = sum(1 for t in tasks if t.status == TaskStatus.DONE)
    return f"{completion_percentage(tasks)}% complete ({done}/{len(tasks)} done)"


def cmd_export(state: AppState, args: list[str]) -> str:
    directory = Path(args[0]) if args else Path(getattr(state.settings, "backup_dir", "."))
    try:
        path = state.backup.export_to_file(directory)
    except OSError:
        logger.exception("Export failed dir=%s", directory)
        return "Export failed (see log)."
    return f"Data exported to {path}"


def cmd_import(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /import <path-to-backup.json>"
    if emit:
        emit(f"Importing {args[0]}...")
    try:
        summary = asyncio.run(state.backup.import_file(args[0]))
    except BackupValidationError as e:
        logger.info("Import rejected: %s", e)
        return f"Invalid backup file: {e}"
    return _after_mutation(
        state, f"Data imported: {summary.categories} categories, {summary.tasks} tasks."
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("cats", cmd_cats, help_text="List categories.")
registry.register("cat", cmd_cat, help_text="Categories: /cat add|edit|color|del ...")
registry.register("add", cmd_add, help_text="Add a task: /add <cat> <title> [due=...] [p=...]")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <task> [title=...] [cat=...] [due=...] [p=...]")
registry.register("status", cmd_status, help_text="Set task status: /status <task> todo|in-progress|done")
registry.register("del", cmd_del, help_text="Delete a task: /del <task>", aliases=["rm"])
registry.register("list", cmd_list, help_text="Show the filtered, sorted task list.", aliases=["ls"])
registry.register("filter", cmd_filter, help_text="Set filters: /filter [cat=] [status=] [p=] [search=] | clear")
registry.register("search", cmd_search, help_text="Search titles: /search <text> (empty clears).")
registry.register("progress", cmd_progress, help_text="Show completion percentage.")
registry.register("export", cmd_export, help_text="Export a JSON backup: /export [dir]")
registry.register("import", cmd_import, help_text="Restore from a JSON backup: /import <file>")
