# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from taskdesk.logging_setup import _ConsoleNoiseFilter


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("taskdesk.tasks.task_manager", logging.INFO, True),
        ("taskdesk.tasks.reminder_service", logging.INFO, False),
        ("taskdesk.tasks.reminder_service", logging.WARNING, True),
        ("httpx", logging.INFO, False),
        ("httpcore.connection", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("asyncio", logging.WARNING, False),
        ("asyncio", logging.ERROR, True),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown
