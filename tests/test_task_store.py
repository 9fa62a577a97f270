# tests/test_task_store.py

from __future__ import annotations

import sqlite3
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest

from taskdesk.core.errors import StorageError
from taskdesk.tasks.task_models import Task, TaskPriority, TaskStatus
from taskdesk.tasks.task_store import TaskStore


def _sample() -> Task:
    created = datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc)
    return Task(
        id="task_1704873600000_abc123xyz",
        title="Pay bills",
        description="electricity + water",
        status=TaskStatus.IN_PROGRESS,
        priority=TaskPriority.HIGH,
        due_date="2024-01-15",
        due_time="09:00",
        reminder_enabled=True,
        reminder_time="2024-01-15T08:30",
        reminder_minutes=30,
        reminder_notified=True,
        tags=["home", "money"],
        created_at=created,
        updated_at=created,
    )


def _put_raw(store: TaskStore, payload: str) -> None:
    conn = sqlite3.connect(str(store.db_path))
    try:
        conn.execute(
            "INSERT OR REPLACE INTO kv(key, value, updated_at) VALUES (?, ?, ?)",
            (store.key, payload, time.time()),
        )
        conn.commit()
    finally:
        conn.close()


def test_absent_key_reads_as_empty(store: TaskStore) -> None:
    assert store.read() == []
    assert store.count() == 0


def test_write_replaces_the_whole_collection(store: TaskStore) -> None:
    task = _sample()
    store.write([task, Task(id="task_2", title="Second")])
    assert [t.id for t in store.read()] == [task.id, "task_2"]

    store.write([task])
    loaded = store.read()
    assert loaded == [task]


def test_persisted_blob_uses_camel_case_keys(store: TaskStore) -> None:
    store.write([_sample()])

    conn = sqlite3.connect(str(store.db_path))
    try:
        (raw,) = conn.execute("SELECT value FROM kv WHERE key = ?", (store.key,)).fetchone()
    finally:
        conn.close()

    assert '"reminderNotified": true' in raw
    assert '"dueDate": "2024-01-15"' in raw
    assert '"createdAt": "2024-01-10T08:00:00+00:00"' in raw


@pytest.mark.parametrize("payload", ["{not json", '{"id": "x"}', "42"])
def test_malformed_payload_reads_as_empty(store: TaskStore, payload: str) -> None:
    _put_raw(store, payload)
    assert store.read() == []


def test_non_object_records_are_skipped(store: TaskStore) -> None:
    _put_raw(store, '[1, "x", {"id": "task_9", "title": "Partial"}]')
    tasks = store.read()
    assert len(tasks) == 1
    assert tasks[0].id == "task_9"
    assert tasks[0].status == TaskStatus.PENDING
    assert tasks[0].priority == TaskPriority.MEDIUM
    assert tasks[0].tags == []
    assert tasks[0].reminder_notified is False


def test_clear(store: TaskStore) -> None:
    store.write([_sample()])
    store.clear()
    assert store.read() == []


def test_keys_are_independent(tmp_path: Path) -> None:
    db = tmp_path / "shared.sqlite3"
    a = TaskStore(db, key="alice")
    b = TaskStore(db, key="bob")

    a.write([_sample()])
    assert b.read() == []
    assert len(a.read()) == 1


def test_unreadable_medium_raises_storage_error(store: TaskStore) -> None:
    conn = sqlite3.connect(str(store.db_path))
    try:
        conn.execute("DROP TABLE kv")
        conn.commit()
    finally:
        conn.close()

    with pytest.raises(StorageError):
        store.read()
    with pytest.raises(StorageError):
        store.write([_sample()])


@pytest.mark.parametrize("minutes", ["Infinity", "NaN", '"soon"', "1e400"])
def test_out_of_range_reminder_minutes_fall_back_to_zero(store: TaskStore, minutes: str) -> None:
    _put_raw(store, '[{"id": "task_1", "title": "Dentist", "reminderMinutes": %s}]' % minutes)
    (task,) = store.read()
    assert task.reminder_minutes == 0


def test_non_finite_values_are_never_persisted(store: TaskStore) -> None:
    store.write([_sample()])
    bad = Task(id="task_2", title="Broken", reminder_minutes=float("inf"))

    with pytest.raises(StorageError):
        store.write([_sample(), bad])
    assert store.read() == [_sample()]
