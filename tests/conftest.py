# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdesk.cli.bootstrap import create_context
from taskdesk.core.state import AppContext
from taskdesk.tasks.reminder_service import ReminderService
from taskdesk.tasks.task_manager import TaskManager
from taskdesk.tasks.task_store import TaskStore

from .fakes import FakeClock, RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap helpers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskdesk-test",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        storage_key="taskdesk_tasks",
        reminder_interval_seconds=60.0,
        reminder_window_seconds=60.0,
        notify_console=False,
        notify_webhook_url=None,
        auth_base_url=None,
        session_token=None,
        http_timeout_seconds=5.0,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    """Real SQLite store: its correctness is part of what we test."""
    return TaskStore(settings.tasks_db_path, key=settings.storage_key)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def manager(store: TaskStore, clock: FakeClock) -> TaskManager:
    return TaskManager(store, clock=clock)


@pytest.fixture()
def reminders(store: TaskStore, clock: FakeClock, notifier: RecordingNotifier) -> ReminderService:
    return ReminderService(store, notifier, clock=clock, interval_seconds=60.0, window_seconds=60.0)


@pytest.fixture()
def ctx(settings: SimpleNamespace, store: TaskStore, clock: FakeClock, notifier: RecordingNotifier) -> AppContext:
    """AppContext wired with the real store and deterministic fakes."""
    return create_context(settings=settings, storage=store, clock=clock, notifier=notifier)
