# src/taskdesk/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task services.

Services depend on Protocols instead of concrete implementations.
This keeps storage and notification swappable and makes testing easier
(e.g. a fake clock instead of real wall-clock delays).
"""

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Awaitable, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import ReminderNotification, Task


class Clock(Protocol):
    """Source of "now" (timezone-aware) and of the delay between reminder ticks."""

    def now(self) -> datetime: ...

    def sleep(self, seconds: float) -> Awaitable[None]: ...


class TaskStorage(Protocol):
    """
    Whole-collection storage.

    read/write always operate on the full task list (one blob), never on a
    single record.
    """

    def read(self) -> list[Task]: ...
    def write(self, tasks: Sequence[Task]) -> None: ...
    def clear(self) -> None: ...


class NotificationSink(Protocol):
    """
    Where fired reminders go.

    Delivery and permission semantics belong to the sink, not to the
    reminder service.
    """

    def notify(self, notification: ReminderNotification) -> Awaitable[None]: ...

