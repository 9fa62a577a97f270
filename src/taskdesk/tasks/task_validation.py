# src/taskdesk/tasks/task_validation.py

from __future__ import annotations

"""
Field rules for tasks.

Every rule is checked and every violation collected; nothing short-circuits.
Validators never mutate their input.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from ..core.errors import ValidationError
from .task_models import TaskPriority, TaskStatus, parse_date, parse_timestamp

TITLE_MAX_LEN = 100
DESCRIPTION_MAX_LEN = 500
# Keeps the computed reminder moment inside the datetime range.
REMINDER_MINUTES_MAX = 366 * 24 * 60

DUE_TIME_REGEX = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")

VALID_STATUSES: tuple[str, ...] = tuple(s.value for s in TaskStatus)
VALID_PRIORITIES: tuple[str, ...] = tuple(p.value for p in TaskPriority)


@dataclass(slots=True, frozen=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def _is_whole_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_task(task: Any) -> ValidationResult:
    """
    Validate a full or partially merged task.

    Accepts anything with task attributes (Task, TaskDraft).
    """
    errors: list[str] = []

    title = getattr(task, "title", None)
    if not title or not isinstance(title, str):
        errors.append("Title is required and must be a string")
    elif not title.strip():
        errors.append("Title cannot be empty")
    elif len(title) > TITLE_MAX_LEN:
        errors.append(f"Title cannot exceed {TITLE_MAX_LEN} characters")

    description = getattr(task, "description", None)
    if description is not None:
        if not isinstance(description, str):
            errors.append("Description must be a string")
        elif len(description) > DESCRIPTION_MAX_LEN:
            errors.append(f"Description cannot exceed {DESCRIPTION_MAX_LEN} characters")

    status = getattr(task, "status", None)
    if status and status not in VALID_STATUSES:
        errors.append(f"Status must be one of: {', '.join(VALID_STATUSES)}")

    priority = getattr(task, "priority", None)
    if priority and priority not in VALID_PRIORITIES:
        errors.append(f"Priority must be one of: {', '.join(VALID_PRIORITIES)}")

    due_date = getattr(task, "due_date", None)
    if due_date and parse_date(due_date) is None:
        errors.append("Due date must be a valid date")

    due_time = getattr(task, "due_time", None)
    if due_time and (not isinstance(due_time, str) or not DUE_TIME_REGEX.match(due_time)):
        errors.append("Due time must be in HH:MM format")

    minutes = getattr(task, "reminder_minutes", None)
    if getattr(task, "reminder_enabled", False):
        reminder_time = getattr(task, "reminder_time", None)
        if reminder_time and parse_timestamp(reminder_time) is None:
            errors.append("Reminder time must be a valid date/time")

        if not _is_whole_number(minutes) or minutes < 0:
            errors.append("Reminder minutes must be a non-negative number")
        elif minutes > REMINDER_MINUTES_MAX:
            errors.append(f"Reminder minutes cannot exceed {REMINDER_MINUTES_MAX}")
    elif minutes is not None and not _is_whole_number(minutes):
        errors.append("Reminder minutes must be a non-negative number")

    tags = getattr(task, "tags", None)
    if tags is not None:
        if not isinstance(tags, (list, tuple)):
            errors.append("Tags must be a list")
        elif any(not isinstance(t, str) for t in tags):
            errors.append("Each tag must be a string")

    return ValidationResult(errors)


def validate_search_query(query: Any) -> ValidationResult:
    if query is not None and not isinstance(query, str):
        return ValidationResult(["Search query must be a string"])
    return ValidationResult()
