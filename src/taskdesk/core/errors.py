# src/taskdesk/core/errors.py

from __future__ import annotations

from collections.abc import Iterable


class TaskdeskError(Exception):
    """Base class for errors the console turns into a one-line reply."""


class ValidationError(TaskdeskError):
    """Rejected input. Carries every violated rule, not just the first one."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = [str(e) for e in errors]
        super().__init__("; ".join(self.errors) or "Invalid input")


class NotFoundError(TaskdeskError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class StorageError(TaskdeskError):
    """The underlying medium could not be read or written."""
