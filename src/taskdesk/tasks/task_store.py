# src/taskdesk/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..core.errors import StorageError
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "taskdesk_tasks"


class TaskStore:
    """
    SQLite-backed whole-collection task store.

    The entire task list is one JSON array kept under a single key of a small
    key/value table. Reads and writes always replace/return the full list:
    - read(): absent key -> [], malformed payload -> [] (logged)
    - write(): replaces the blob in one statement
    - clear(): removes the key

    Thread-safety:
    - each method opens its own SQLite connection
    - callers serialize read-modify-write cycles (see AppContext.lock)
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._db_path = Path(db_path)
        self._key = key
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count()
        except StorageError:
            total = -1
        logger.info("TaskStore ready db=%s key=%s total=%s", self._db_path, self._key, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def key(self) -> str:
        return self._key

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to open task storage at {self._db_path}: {e}") from e
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize task storage: {e}") from e
        finally:
            conn.close()

    @staticmethod
    def _decode(raw: str | None) -> list[Task]:
        if not raw:
            return []
        try:
            payload: Any = json.loads(raw)
        except ValueError:
            logger.warning("Task storage payload is not valid JSON; treating as empty.")
            return []
        if not isinstance(payload, list):
            logger.warning("Task storage payload is not a list (%s); treating as empty.", type(payload).__name__)
            return []

        tasks: list[Task] = []
        for item in payload:
            if not isinstance(item, dict):
                logger.warning("Skipping malformed task record: %r", item)
                continue
            tasks.append(Task.from_dict(item))
        return tasks

    # ---- public API ----

    def read(self) -> list[Task]:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (self._key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read tasks from storage: {e}") from e

        return self._decode(row["value"] if row else None)

    def write(self, tasks: Sequence[Task]) -> None:
        try:
            blob = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to encode tasks: {e}") from e

        self._put(blob)
        logger.debug("Saved %d tasks key=%s", len(tasks), self._key)

    def _put(self, value: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (self._key, value, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save tasks to storage: {e}") from e

    def clear(self) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (self._key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to clear tasks from storage: {e}") from e
        logger.info("Cleared task storage key=%s", self._key)

    def count(self) -> int:
        return len(self.read())
