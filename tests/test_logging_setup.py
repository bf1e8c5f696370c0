# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from taskshelf.logging_setup import _ConsoleNoiseFilter


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("taskshelf.tasks.task_store", logging.DEBUG, True),
        ("taskshelf.storage.kv_store", logging.INFO, False),
        ("taskshelf.storage.kv_store", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("asyncio", logging.WARNING, False),
        ("asyncio", logging.ERROR, True),
    ],
)
def test_console_filter_thresholds(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown
