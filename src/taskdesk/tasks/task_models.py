# src/taskdesk/tasks/task_models.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime, time, timedelta, timezone
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError

logger = logging.getLogger(__name__)


class TaskStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class _Unset:
    """Marker for "field not provided" in partial updates (None is a real value)."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


# ---- timestamps ----


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO date or datetime into an aware datetime.

    Naive values are interpreted as local time (this is what a
    "datetime-local" form field produces). Returns None if unparseable.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def parse_date(value: Any) -> date | None:
    """Calendar day of a date/datetime value (local day for aware datetimes)."""
    if isinstance(value, datetime):
        return value.astimezone().date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return dt.astimezone().date() if dt.tzinfo else dt.date()


def format_timestamp(dt: datetime) -> str:
    return dt.isoformat()


def compute_reminder_time(due_date: Any, due_time: Any = None, minutes: Any = 0) -> str | None:
    """
    Reminder moment = due date at due time (00:00 if missing) minus `minutes`.

    Returns a naive local "YYYY-MM-DDTHH:MM" string, or None without a due date
    or when the offset falls outside the datetime range.
    """
    day = parse_date(due_date)
    if day is None:
        return None

    at = time.min
    if isinstance(due_time, str) and due_time.strip():
        try:
            hh, mm = due_time.strip().split(":", 1)
            at = time(int(hh), int(mm))
        except ValueError:
            at = time.min

    try:
        offset = max(0, int(minutes or 0))
    except (TypeError, ValueError, OverflowError):
        offset = 0

    try:
        moment = datetime.combine(day, at) - timedelta(minutes=offset)
    except OverflowError:
        return None
    return moment.strftime("%Y-%m-%dT%H:%M")


# ---- normalization ----


def clean_str(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def normalize_tags(tags: Any) -> Any:
    """
    Trim tags and drop empty ones. Non-string items are kept so validation
    can report them; a non-list value is returned as-is for the same reason.
    """
    if tags is None:
        return []
    if not isinstance(tags, (list, tuple)):
        return tags
    out: list[Any] = []
    for t in tags:
        if isinstance(t, str):
            t = t.strip()
            if not t:
                continue
        out.append(t)
    return out


# ---- records ----

# python attribute -> persisted (camelCase) key
_JSON_KEYS: dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "due_date": "dueDate",
    "due_time": "dueTime",
    "reminder_enabled": "reminderEnabled",
    "reminder_time": "reminderTime",
    "reminder_minutes": "reminderMinutes",
    "reminder_notified": "reminderNotified",
    "tags": "tags",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}
_ATTR_BY_JSON_KEY = {v: k for k, v in _JSON_KEYS.items()}


def _attr_name(key: str) -> str | None:
    """Accept both camelCase and snake_case input keys."""
    if key in _JSON_KEYS:
        return key
    return _ATTR_BY_JSON_KEY.get(key)


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str = ""
    status: str = TaskStatus.PENDING
    priority: str = TaskPriority.MEDIUM

    due_date: str | None = None
    due_time: str | None = None

    reminder_enabled: bool = False
    reminder_time: str | None = None
    reminder_minutes: int = 0
    reminder_notified: bool = False

    tags: list[str] = field(default_factory=list)

    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def reminder_at(self) -> datetime | None:
        return parse_timestamp(self.reminder_time)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for attr, key in _JSON_KEYS.items():
            val = getattr(self, attr)
            if isinstance(val, datetime):
                val = format_timestamp(val)
            elif isinstance(val, StrEnum):
                val = val.value
            elif attr == "tags":
                val = list(val)
            out[key] = val
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Task:
        """
        Build a Task from a persisted record.

        Tolerant by design of old/partial payloads: missing fields get defaults,
        unparseable timestamps fall back to the epoch.
        """

        def get(attr: str, default: Any = None) -> Any:
            key = _JSON_KEYS[attr]
            if key in data:
                return data[key]
            return data.get(attr, default)

        def ts(attr: str) -> datetime:
            dt = parse_timestamp(get(attr))
            return dt if dt is not None else datetime.fromtimestamp(0, timezone.utc)

        created_at = ts("created_at")
        updated_at = ts("updated_at")
        tags = get("tags") or []

        try:
            minutes = int(get("reminder_minutes") or 0)
        except (TypeError, ValueError, OverflowError):
            minutes = 0

        return cls(
            id=str(get("id") or ""),
            title=str(get("title") or ""),
            description=str(get("description") or ""),
            status=str(get("status") or TaskStatus.PENDING),
            priority=str(get("priority") or TaskPriority.MEDIUM),
            due_date=get("due_date") or None,
            due_time=get("due_time") or None,
            reminder_enabled=bool(get("reminder_enabled", False)),
            reminder_time=get("reminder_time") or None,
            reminder_minutes=minutes,
            reminder_notified=bool(get("reminder_notified", False)),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            created_at=created_at,
            updated_at=max(updated_at, created_at),
        )


def _unknown_keys_error(kind: str, keys: list[str]) -> ValidationError:
    return ValidationError([f"Unknown {kind} field: {k}" for k in sorted(keys)])


@dataclass(slots=True)
class TaskDraft:
    """Input of TaskManager.add. Values are not coerced; validation reports bad types."""

    title: Any = None
    description: Any = None
    status: Any = None
    priority: Any = None
    due_date: Any = None
    due_time: Any = None
    reminder_enabled: Any = False
    reminder_time: Any = None
    reminder_minutes: Any = 0
    tags: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TaskDraft:
        allowed = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        unknown: list[str] = []
        for key, val in data.items():
            attr = _attr_name(str(key))
            if attr in allowed:
                values[attr] = val
            elif attr in ("id", "created_at", "updated_at", "reminder_notified"):
                # assigned by the manager
                continue
            else:
                unknown.append(str(key))
        if unknown:
            raise _unknown_keys_error("task", unknown)
        return cls(**values)


# Fields a partial update may touch. id/created_at/updated_at/reminder_notified are
# owned by the manager and reminder service.
UPDATABLE_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "due_time",
    "reminder_enabled",
    "reminder_time",
    "reminder_minutes",
    "tags",
)
_PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at", "reminder_notified"})


@dataclass(slots=True)
class TaskUpdate:
    """Partial update: fields left as UNSET are not touched."""

    title: Any = UNSET
    description: Any = UNSET
    status: Any = UNSET
    priority: Any = UNSET
    due_date: Any = UNSET
    due_time: Any = UNSET
    reminder_enabled: Any = UNSET
    reminder_time: Any = UNSET
    reminder_minutes: Any = UNSET
    tags: Any = UNSET

    def provided(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in UPDATABLE_FIELDS if getattr(self, name) is not UNSET}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TaskUpdate:
        values: dict[str, Any] = {}
        unknown: list[str] = []
        for key, val in data.items():
            attr = _attr_name(str(key))
            if attr in UPDATABLE_FIELDS:
                values[attr] = val
            elif attr in _PROTECTED_FIELDS:
                logger.debug("Ignoring protected field in update: %s", key)
            else:
                unknown.append(str(key))
        if unknown:
            raise _unknown_keys_error("update", unknown)
        return cls(**values)


@dataclass(slots=True, frozen=True)
class FilterCriteria:
    """Each non-empty field narrows the result; empty fields impose no constraint."""

    status: str | None = None
    priority: str | None = None
    due_date: str | None = None
    tag: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FilterCriteria:
        aliases = {"status": "status", "priority": "priority", "dueDate": "due_date", "due_date": "due_date", "tag": "tag"}
        values: dict[str, Any] = {}
        unknown: list[str] = []
        for key, val in data.items():
            attr = aliases.get(str(key))
            if attr is None:
                unknown.append(str(key))
                continue
            values[attr] = val or None
        if unknown:
            raise _unknown_keys_error("filter", unknown)
        return cls(**values)


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    high_priority: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "pending": self.pending,
            "inProgress": self.in_progress,
            "completed": self.completed,
            "highPriority": self.high_priority,
        }


@dataclass(slots=True, frozen=True)
class ReminderNotification:
    title: str
    body: str
    tag: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)
