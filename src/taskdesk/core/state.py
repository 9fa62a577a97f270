# src/taskdesk/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..auth.session import SessionUser
    from ..tasks.reminder_service import ReminderService
    from ..tasks.task_api import TaskCommands
    from ..tasks.task_manager import TaskManager
    from .ports import Clock, TaskStorage


@dataclass
class AppContext:
    """
    Everything the task subsystem needs, owned in one place instead of
    module-level globals: storage handle, clock, the lock serializing
    read-modify-write cycles, and the services built on top of them.
    """

    settings: Any

    storage: TaskStorage
    clock: Clock
    manager: TaskManager
    reminders: ReminderService
    commands: TaskCommands

    user: SessionUser | None = None
    lock: threading.RLock = field(default_factory=threading.RLock)
