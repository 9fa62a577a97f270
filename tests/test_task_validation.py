# tests/test_task_validation.py

from __future__ import annotations

from dataclasses import replace

import pytest

from taskdesk.core.errors import ValidationError
from taskdesk.tasks.task_models import Task, TaskDraft
from taskdesk.tasks.task_validation import validate_search_query, validate_task


def _task(**kw) -> Task:
    base = Task(id="task_1_abc", title="Buy milk")
    return replace(base, **kw)


def test_valid_task_has_no_errors() -> None:
    result = validate_task(_task(due_date="2024-01-15", due_time="9:05", tags=["home"]))
    assert result.is_valid
    assert result.errors == []


def test_all_violations_are_collected() -> None:
    result = validate_task(_task(title="   ", status="archived", priority="urgent", due_time="25:00"))
    assert not result.is_valid
    assert result.errors == [
        "Title cannot be empty",
        "Status must be one of: pending, in-progress, completed",
        "Priority must be one of: low, medium, high",
        "Due time must be in HH:MM format",
    ]


def test_length_limits() -> None:
    assert validate_task(_task(title="x" * 100, description="d" * 500)).is_valid

    errors = validate_task(_task(title="x" * 101, description="d" * 501)).errors
    assert "Title cannot exceed 100 characters" in errors
    assert "Description cannot exceed 500 characters" in errors


def test_title_must_be_a_string() -> None:
    errors = validate_task(TaskDraft(title=None)).errors
    assert errors == ["Title is required and must be a string"]
    assert validate_task(TaskDraft(title=42)).errors == ["Title is required and must be a string"]


def test_dates_must_parse() -> None:
    errors = validate_task(_task(due_date="2024-13-45")).errors
    assert errors == ["Due date must be a valid date"]

    errors = validate_task(_task(reminder_enabled=True, reminder_time="tomorrow-ish")).errors
    assert errors == ["Reminder time must be a valid date/time"]


def test_reminder_minutes_sign_checked_only_when_enabled() -> None:
    assert validate_task(_task(reminder_enabled=False, reminder_minutes=-5)).is_valid

    bad = ["Reminder minutes must be a non-negative number"]
    assert validate_task(_task(reminder_enabled=True, reminder_minutes=-5)).errors == bad
    assert validate_task(_task(reminder_enabled=True, reminder_minutes="10")).errors == bad
    assert validate_task(_task(reminder_enabled=True, reminder_minutes=True)).errors == bad
    assert validate_task(_task(reminder_enabled=True, reminder_minutes=0)).is_valid


@pytest.mark.parametrize("minutes", [2.5, float("inf"), float("nan")])
def test_reminder_minutes_must_be_whole(minutes: float) -> None:
    bad = ["Reminder minutes must be a non-negative number"]
    assert validate_task(_task(reminder_enabled=True, reminder_minutes=minutes)).errors == bad
    assert validate_task(_task(reminder_enabled=False, reminder_minutes=minutes)).errors == bad


def test_reminder_minutes_upper_bound() -> None:
    assert validate_task(_task(reminder_enabled=True, reminder_minutes=527040)).is_valid
    assert validate_task(_task(reminder_enabled=True, reminder_minutes=10**10)).errors == [
        "Reminder minutes cannot exceed 527040"
    ]


def test_tags_shape() -> None:
    assert validate_task(_task(tags="home")).errors == ["Tags must be a list"]
    assert validate_task(_task(tags=["home", 3])).errors == ["Each tag must be a string"]


def test_validation_does_not_mutate_input() -> None:
    task = _task(title="  padded  ", tags=["  a  "])
    before = task.to_dict()
    validate_task(task)
    assert task.to_dict() == before


def test_raise_for_errors_joins_messages() -> None:
    result = validate_task(_task(title="", priority="urgent"))
    with pytest.raises(ValidationError) as exc:
        result.raise_for_errors()
    assert str(exc.value) == (
        "Title is required and must be a string; Priority must be one of: low, medium, high"
    )
    assert len(exc.value.errors) == 2


def test_search_query_must_be_text() -> None:
    assert validate_search_query("milk").is_valid
    assert validate_search_query(None).is_valid
    assert validate_search_query(7).errors == ["Search query must be a string"]
