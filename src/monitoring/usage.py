"""Language-model usage counters with a daily reset."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from src.extraction.temporal import Clock, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageSnapshot:
    """Point-in-time copy of the counters."""

    requests: int
    tokens: int
    last_reset: datetime


class UsageTracker:
    """Counts successful extractions and the tokens they consumed.

    Counters are guarded by a lock so concurrent requests (threads or tasks)
    can record safely. ``start()`` launches a background task that zeroes the
    counters once the UTC date changes; ``stop()`` cancels it.
    """

    def __init__(self, check_interval: float = 3600.0, clock: Clock = utc_now) -> None:
        self._check_interval = check_interval
        self._clock = clock
        self._lock = threading.Lock()
        self._requests = 0
        self._tokens = 0
        self._last_reset = clock()
        self._task: asyncio.Task[None] | None = None

    def record(self, tokens: int) -> None:
        with self._lock:
            self._requests += 1
            self._tokens += max(tokens, 0)
        logger.debug("Recorded LLM usage: %d tokens", tokens)

    def snapshot(self) -> UsageSnapshot:
        with self._lock:
            return UsageSnapshot(self._requests, self._tokens, self._last_reset)

    def reset(self) -> None:
        with self._lock:
            self._reset_locked(self._clock())
        logger.info("LLM usage counters reset")

    def reset_if_new_day(self) -> bool:
        """Reset when the clock's date differs from the last reset; return True if reset."""
        with self._lock:
            now = self._clock()
            stale = now.date() != self._last_reset.date()
            if stale:
                self._reset_locked(now)
        if stale:
            logger.info("LLM usage counters reset for %s", now.date().isoformat())
        return stale

    def _reset_locked(self, now: datetime) -> None:
        # Caller holds self._lock.
        self._requests = 0
        self._tokens = 0
        self._last_reset = now

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._check_interval)
            self.reset_if_new_day()
