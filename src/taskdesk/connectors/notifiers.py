# src/taskdesk/connectors/notifiers.py

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from datetime import datetime
from typing import TextIO

import httpx

from ..core.ports import NotificationSink
from ..tasks.task_models import ReminderNotification

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """Print reminders into the terminal (interleaves with the REPL output)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def notify(self, notification: ReminderNotification) -> None:
        stream = self._stream or sys.stdout
        print(
            f"\n[{_ts_local()}] [REMINDER] {notification.title}: {notification.body}",
            file=stream,
            flush=True,
        )


class WebhookNotifier:
    """
    POST reminders as JSON {title, body, tag} to a webhook.

    Non-2xx responses raise, which abandons the current reminder tick.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def notify(self, notification: ReminderNotification) -> None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.post(self._url, json=notification.as_dict())
            resp.raise_for_status()
        logger.debug("Webhook notified tag=%s status=%s", notification.tag, resp.status_code)


class FanoutNotifier:
    """Deliver to every sink in order; the first failure propagates."""

    def __init__(self, sinks: Sequence[NotificationSink]) -> None:
        self._sinks = list(sinks)

    async def notify(self, notification: ReminderNotification) -> None:
        for sink in self._sinks:
            await sink.notify(notification)
