# src/taskdesk/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppContext (storage/clock/notifiers/services),
- builds the session client for the auth gate.
"""

from __future__ import annotations

import logging
import threading

from ..auth.session import SessionClient
from ..config import get_settings
from ..connectors.notifiers import ConsoleNotifier, FanoutNotifier, WebhookNotifier
from ..core.clock import SystemClock
from ..core.ports import Clock, NotificationSink, TaskStorage
from ..core.state import AppContext
from ..tasks.reminder_service import ReminderService
from ..tasks.task_api import TaskCommands
from ..tasks.task_manager import TaskManager
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_notifier(settings) -> NotificationSink:
    sinks: list[NotificationSink] = []
    if getattr(settings, "notify_console", True):
        sinks.append(ConsoleNotifier())
    webhook_url = getattr(settings, "notify_webhook_url", None)
    if webhook_url:
        sinks.append(WebhookNotifier(webhook_url, timeout=float(getattr(settings, "http_timeout_seconds", 10.0))))
        logger.info("Reminder webhook enabled url=%s", webhook_url)
    if not sinks:
        logger.warning("No notification sinks configured; reminders will only be logged.")
    return FanoutNotifier(sinks)


def build_session(settings) -> SessionClient | None:
    """SessionClient if an auth API is configured, else None (gate disabled)."""
    base_url = getattr(settings, "auth_base_url", None)
    if not base_url:
        return None
    return SessionClient(
        base_url,
        getattr(settings, "session_token", None),
        timeout=float(getattr(settings, "http_timeout_seconds", 10.0)),
    )


def create_context(
    *,
    settings=None,
    storage: TaskStorage | None = None,
    clock: Clock | None = None,
    notifier: NotificationSink | None = None,
) -> AppContext:
    """
    Create AppContext from the provided settings.

    Keeping collaborators injectable makes the app easier to test and avoids
    hidden global reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        _ensure_local_dirs(settings)
        storage = TaskStore(settings.tasks_db_path, key=settings.storage_key)

    clock = clock or SystemClock()
    lock = threading.RLock()

    manager = TaskManager(storage, clock=clock)
    reminders = ReminderService(
        storage,
        notifier or build_notifier(settings),
        clock=clock,
        interval_seconds=float(getattr(settings, "reminder_interval_seconds", 60.0)),
        window_seconds=float(getattr(settings, "reminder_window_seconds", 60.0)),
        lock=lock,
    )

    return AppContext(
        settings=settings,
        storage=storage,
        clock=clock,
        manager=manager,
        reminders=reminders,
        commands=TaskCommands(manager),
        lock=lock,
    )
