# src/taskdesk/tasks/task_manager.py

from __future__ import annotations

"""
Task manager.

Every operation works on the whole collection:
- read the full task list from storage,
- compute,
- write the full list back (mutations only),
- return the result.

There is no locking here; callers that interleave mutations (console +
reminder service) share AppContext.lock.
"""

import logging
import secrets
import string
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from ..core.clock import SystemClock
from ..core.errors import NotFoundError, ValidationError
from ..core.ports import Clock, TaskStorage
from .task_models import (
    FilterCriteria,
    Task,
    TaskDraft,
    TaskPriority,
    TaskStats,
    TaskStatus,
    TaskUpdate,
    clean_str,
    compute_reminder_time,
    normalize_tags,
    parse_date,
)
from .task_validation import validate_search_query, validate_task

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 9

# Fields whose string values are trimmed and where "" means "not set".
_OPTIONAL_TEXT_FIELDS = ("due_date", "due_time", "reminder_time")
# A derived reminder follows these fields unless the update pins reminder_time.
_REMINDER_INPUTS = frozenset({"due_date", "due_time", "reminder_minutes"})


def generate_task_id(now: datetime) -> str:
    """
    task_<epoch millis>_<random base36 suffix>.

    Collisions are not checked; with a 9-char random suffix they are negligible.
    """
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"task_{millis}_{suffix}"


def _normalize_changes(changes: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, val in changes.items():
        if name == "tags":
            out[name] = normalize_tags(val)
        elif name == "description":
            out[name] = "" if val is None else clean_str(val)
        elif name in _OPTIONAL_TEXT_FIELDS:
            val = clean_str(val)
            out[name] = val or None
        elif name == "reminder_minutes":
            out[name] = 0 if val is None else val
        elif name == "reminder_enabled":
            out[name] = bool(val)
        elif name in ("status", "priority"):
            # blank means unchanged
            val = clean_str(val)
            if val:
                out[name] = val
        else:
            out[name] = clean_str(val)
    return out


class TaskManager:
    def __init__(self, storage: TaskStorage, *, clock: Clock | None = None) -> None:
        self._storage = storage
        self._clock: Clock = clock or SystemClock()

    @property
    def storage(self) -> TaskStorage:
        return self._storage

    # ---- helpers ----

    def _now(self) -> datetime:
        return self._clock.now()

    def _next_updated_at(self, previous: datetime) -> datetime:
        """updated_at must strictly advance, even if the clock did not move."""
        now = self._now()
        if now <= previous:
            return previous + timedelta(microseconds=1)
        return now

    @staticmethod
    def _index_of(tasks: list[Task], task_id: str) -> int:
        for i, t in enumerate(tasks):
            if t.id == task_id:
                return i
        return -1

    # ---- CRUD ----

    def add(self, draft: TaskDraft | Mapping[str, Any]) -> Task:
        if not isinstance(draft, TaskDraft):
            draft = TaskDraft.from_mapping(draft)

        tasks = self._storage.read()
        now = self._now()

        task = Task(
            id=generate_task_id(now),
            title=clean_str(draft.title),
            description=clean_str(draft.description) or "",
            status=clean_str(draft.status) or TaskStatus.PENDING,
            priority=clean_str(draft.priority) or TaskPriority.MEDIUM,
            due_date=clean_str(draft.due_date) or None,
            due_time=clean_str(draft.due_time) or None,
            reminder_enabled=bool(draft.reminder_enabled),
            reminder_time=clean_str(draft.reminder_time) or None,
            reminder_minutes=0 if draft.reminder_minutes is None else draft.reminder_minutes,
            reminder_notified=False,
            tags=normalize_tags(draft.tags),
            created_at=now,
            updated_at=now,
        )

        if task.reminder_enabled and task.reminder_time is None and task.due_date:
            task.reminder_time = compute_reminder_time(task.due_date, task.due_time, task.reminder_minutes)

        validate_task(task).raise_for_errors()

        tasks.append(task)
        self._storage.write(tasks)
        logger.info("Task added id=%s priority=%s due=%s", task.id, task.priority, task.due_date)
        return task

    def list(self) -> list[Task]:
        return self._storage.read()

    def get(self, task_id: str) -> Task | None:
        for t in self._storage.read():
            if t.id == task_id:
                return t
        return None

    def update(self, task_id: str, update: TaskUpdate | Mapping[str, Any]) -> Task:
        """
        Merge `update` onto the stored task.

        id and created_at are always preserved; updated_at always advances.
        An enabled reminder is re-derived from the due date, due time and minutes
        whenever one of those changes and reminder_time itself is not given.
        reminder_notified resets when reminder_time changes.
        The merged record is re-validated before anything is written.
        """
        if not isinstance(update, TaskUpdate):
            update = TaskUpdate.from_mapping(update)

        tasks = self._storage.read()
        idx = self._index_of(tasks, task_id)
        if idx < 0:
            raise NotFoundError(task_id)

        current = tasks[idx]
        changes = _normalize_changes(update.provided())

        merged = replace(
            current,
            **changes,
            id=current.id,
            created_at=current.created_at,
            updated_at=self._next_updated_at(current.updated_at),
        )

        if (
            "reminder_time" not in changes
            and merged.reminder_enabled
            and merged.due_date
            and (merged.reminder_time is None or not _REMINDER_INPUTS.isdisjoint(changes))
        ):
            merged.reminder_time = compute_reminder_time(merged.due_date, merged.due_time, merged.reminder_minutes)

        if merged.reminder_time != current.reminder_time:
            merged.reminder_notified = False

        validate_task(merged).raise_for_errors()

        tasks[idx] = merged
        self._storage.write(tasks)
        logger.info("Task updated id=%s fields=%s", task_id, ",".join(sorted(changes)) or "-")
        return merged

    def delete(self, task_id: str) -> None:
        tasks = self._storage.read()
        idx = self._index_of(tasks, task_id)
        if idx < 0:
            raise NotFoundError(task_id)

        del tasks[idx]
        self._storage.write(tasks)
        logger.info("Task deleted id=%s", task_id)

    def toggle_complete(self, task_id: str) -> Task:
        task = self.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        new_status = TaskStatus.PENDING if task.is_completed else TaskStatus.COMPLETED
        return self.update(task_id, TaskUpdate(status=new_status))

    # ---- queries ----

    def filter(self, criteria: FilterCriteria | Mapping[str, Any]) -> list[Task]:
        """
        Narrow by exact status/priority, calendar day of due_date, and a
        case-insensitive tag. Storage order is preserved.
        """
        if not isinstance(criteria, FilterCriteria):
            criteria = FilterCriteria.from_mapping(criteria)

        tasks = self._storage.read()

        if criteria.status:
            tasks = [t for t in tasks if t.status == criteria.status]

        if criteria.priority:
            tasks = [t for t in tasks if t.priority == criteria.priority]

        if criteria.due_date:
            day = parse_date(criteria.due_date)
            tasks = [t for t in tasks if day is not None and parse_date(t.due_date) == day]

        if criteria.tag:
            wanted = str(criteria.tag).lower()
            tasks = [t for t in tasks if any(tag.lower() == wanted for tag in t.tags)]

        return tasks

    def search(self, query: Any) -> list[Task]:
        result = validate_search_query(query)
        if not result.is_valid:
            raise ValidationError(result.errors)

        tasks = self._storage.read()
        term = (query or "").strip().lower()
        if not term:
            return tasks

        def matches(t: Task) -> bool:
            if term in t.title.lower():
                return True
            if t.description and term in t.description.lower():
                return True
            return any(term in tag.lower() for tag in t.tags)

        return [t for t in tasks if matches(t)]

    def stats(self) -> TaskStats:
        total = pending = in_progress = completed = high = 0
        for t in self._storage.read():
            total += 1
            if t.status == TaskStatus.PENDING:
                pending += 1
            elif t.status == TaskStatus.IN_PROGRESS:
                in_progress += 1
            elif t.status == TaskStatus.COMPLETED:
                completed += 1
            if t.priority == TaskPriority.HIGH:
                high += 1
        return TaskStats(
            total=total,
            pending=pending,
            in_progress=in_progress,
            completed=completed,
            high_priority=high,
        )
