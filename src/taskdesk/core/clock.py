# src/taskdesk/core/clock.py

from __future__ import annotations

import asyncio
from datetime import datetime, timezone


class SystemClock:
    """Wall clock in UTC; sleeping is plain asyncio.sleep."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, float(seconds)))
