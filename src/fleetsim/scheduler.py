"""Non-re-entrant recurring timer."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any

_logger = logging.getLogger(__name__)


class IntervalScheduler:
    """Fires *callback* every *interval* seconds from a background task.

    Ticks are single-flight.  When a tick is still running as the next
    one comes due, the new tick is skipped rather than queued, and a
    manual :meth:`run_once` obeys the same rule.  Exceptions raised by
    the callback are logged and the timer keeps going.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[Any]],
        interval: float,
        *,
        name: str = "fleetsim-scheduler",
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self._callback = callback
        self._interval = interval
        self._name = name
        self._timer: asyncio.Task[None] | None = None
        self._current: asyncio.Task[bool] | None = None
        self._skipped = 0

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def tick_in_progress(self) -> bool:
        return self._current is not None and not self._current.done()

    @property
    def skipped_ticks(self) -> int:
        return self._skipped

    async def run_once(self) -> bool:
        """Run one tick now.  Returns ``False`` if a tick was already in flight."""
        if self.tick_in_progress:
            self._skipped += 1
            _logger.debug("Previous tick still running; skipping")
            return False
        self._current = asyncio.create_task(self._guarded_tick(), name=f"{self._name}-tick")
        return await asyncio.shield(self._current)

    async def _guarded_tick(self) -> bool:
        try:
            await self._callback()
        except Exception:
            _logger.exception("Scheduled tick failed")
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if self.tick_in_progress:
                self._skipped += 1
                _logger.debug("Previous tick still running; skipping")
                continue
            self._current = asyncio.create_task(self._guarded_tick(), name=f"{self._name}-tick")

    def start(self) -> None:
        if self.is_running:
            return
        self._timer = asyncio.create_task(self._run(), name=self._name)
        _logger.debug("Scheduler started interval=%.3fs", self._interval)

    async def stop(self) -> None:
        """Cancel the timer and wait for an in-flight tick to finish."""
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await timer
        current = self._current
        if current is not None and not current.done():
            await current
        _logger.debug("Scheduler stopped")
