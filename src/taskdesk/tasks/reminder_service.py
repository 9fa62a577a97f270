# src/taskdesk/tasks/reminder_service.py

from __future__ import annotations

"""
Reminder service.

A small polling loop that, on every tick:
- reads the whole task collection,
- picks tasks whose reminder falls inside the due window,
- sends a notification via an injected sink,
- marks the task as notified (read-modify-write of the collection).

Per task:  no reminder -> armed -> fired (reminder_notified=True).
Fired and completed tasks are never scanned again. Only a change of
reminder_time (via TaskManager.update) re-arms a reminder.
"""

import asyncio
import contextlib
import logging
import threading
from datetime import datetime, timedelta

from ..core.clock import SystemClock
from ..core.ports import Clock, NotificationSink, TaskStorage
from .task_models import ReminderNotification, Task

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0
DEFAULT_WINDOW_SECONDS = 60.0

NOTIFICATION_TITLE = "Task Reminder"


def is_armed(task: Task) -> bool:
    return bool(
        task.reminder_enabled
        and task.reminder_time
        and not task.reminder_notified
        and not task.is_completed
    )


def is_reminder_due(task: Task, now: datetime, window_seconds: float = DEFAULT_WINDOW_SECONDS) -> bool:
    """
    Due when  -window < reminder_time - now <= window.

    The window straddles the scheduled moment to absorb polling granularity.
    Once `now` is more than one window past the reminder it is never fired.
    """
    if not is_armed(task):
        return False
    at = task.reminder_at
    if at is None:
        return False
    delta = at - now
    window = timedelta(seconds=window_seconds)
    return -window < delta <= window


def build_notification(task: Task) -> ReminderNotification:
    body = task.title
    if task.due_time:
        body = f"{body} - Due at {task.due_time}"
    return ReminderNotification(title=NOTIFICATION_TITLE, body=body, tag=task.id)


class ReminderService:
    def __init__(
        self,
        storage: TaskStorage,
        notifier: NotificationSink,
        *,
        clock: Clock | None = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        lock: threading.RLock | None = None,
    ) -> None:
        self._storage = storage
        self._notifier = notifier
        self._clock: Clock = clock or SystemClock()
        self._interval_s = max(0.01, float(interval_seconds))
        self._window_s = float(window_seconds)
        self._lock = lock or threading.RLock()
        self._runner: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    # ---- scanning ----

    async def check_reminders(self) -> list[str]:
        """
        One full scan. Returns ids notified during this tick.

        Any error is logged and abandons the rest of the tick; the next tick
        starts from scratch. A reminder missed here may still fire on the
        next tick if it is still inside the window.
        """
        fired: list[str] = []
        try:
            now = self._clock.now()
            with self._lock:
                tasks = self._storage.read()

            for task in tasks:
                if not is_reminder_due(task, now, self._window_s):
                    continue

                await self._notifier.notify(build_notification(task))
                self.mark_as_notified(task.id)
                fired.append(task.id)
                logger.info("Reminder fired task_id=%s reminder_time=%s", task.id, task.reminder_time)
        except Exception:
            logger.exception("Reminder scan failed (fired=%d before failure)", len(fired))
        return fired

    def mark_as_notified(self, task_id: str) -> bool:
        with self._lock:
            tasks = self._storage.read()
            for t in tasks:
                if t.id == task_id:
                    t.reminder_notified = True
                    self._storage.write(tasks)
                    return True
        logger.warning("Task %s disappeared before it could be marked notified", task_id)
        return False

    def get_upcoming_reminders(self) -> list[Task]:
        """Armed reminders still in the future, soonest first."""
        now = self._clock.now()
        with self._lock:
            tasks = self._storage.read()

        upcoming: list[tuple[datetime, Task]] = []
        for t in tasks:
            if not is_armed(t):
                continue
            at = t.reminder_at
            if at is not None and at > now:
                upcoming.append((at, t))

        upcoming.sort(key=lambda pair: pair[0])
        return [t for _, t in upcoming]

    # ---- lifecycle ----

    async def _run(self) -> None:
        logger.info("Reminder service started (interval=%.1fs window=%.1fs)", self._interval_s, self._window_s)
        try:
            while True:
                await self.check_reminders()
                await self._clock.sleep(self._interval_s)
        finally:
            logger.info("Reminder service stopped")

    def start(self) -> None:
        """Schedule the polling loop on the running event loop (no-op if already running)."""
        if self.running:
            return
        self._runner = asyncio.get_running_loop().create_task(self._run(), name="reminder-service")

    async def stop(self) -> None:
        """Cancel the pending timer and wait for the loop to exit. Safe when not running."""
        runner, self._runner = self._runner, None
        if runner is None or runner.done():
            return
        runner.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await runner
