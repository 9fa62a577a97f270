# tests/fakes.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from taskdesk.tasks.task_models import ReminderNotification


class FakeClock:
    """
    Deterministic clock.

    sleep() advances time instantly and yields once to the event loop, so a
    polling loop driven by this clock makes progress without real delays.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)


@dataclass(slots=True)
class RecordingNotifier:
    """NotificationSink that records every notification."""

    sent: list[ReminderNotification] = field(default_factory=list)

    async def notify(self, notification: ReminderNotification) -> None:
        self.sent.append(notification)


@dataclass(slots=True)
class FlakyNotifier:
    """Fails the first `failures` calls, then records like RecordingNotifier."""

    failures: int = 1
    calls: int = 0
    sent: list[ReminderNotification] = field(default_factory=list)

    async def notify(self, notification: ReminderNotification) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError("notification sink unavailable")
        self.sent.append(notification)
