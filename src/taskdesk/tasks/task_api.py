# src/taskdesk/tasks/task_api.py

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .task_manager import TaskManager
from .task_models import FilterCriteria, Task, TaskDraft, TaskStats, TaskUpdate


class TaskCommands:
    """
    Programmatic entry point over TaskManager.

    Accepts plain mappings (camelCase or snake_case keys), converts them into
    typed inputs and passes through. No behavior of its own.
    """

    def __init__(self, manager: TaskManager) -> None:
        self._manager = manager

    def add(self, data: Mapping[str, Any]) -> Task:
        return self._manager.add(TaskDraft.from_mapping(data))

    def list(self) -> list[Task]:
        return self._manager.list()

    def get(self, task_id: str) -> Task | None:
        return self._manager.get(task_id)

    def update(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        return self._manager.update(task_id, TaskUpdate.from_mapping(updates))

    def delete(self, task_id: str) -> bool:
        self._manager.delete(task_id)
        return True

    def toggle(self, task_id: str) -> Task:
        return self._manager.toggle_complete(task_id)

    def filter(self, criteria: Mapping[str, Any]) -> list[Task]:
        return self._manager.filter(FilterCriteria.from_mapping(criteria))

    def search(self, query: Any) -> list[Task]:
        return self._manager.search(query)

    def stats(self) -> TaskStats:
        return self._manager.stats()
