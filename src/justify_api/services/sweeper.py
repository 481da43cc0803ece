"""Background task that periodically purges stale in-memory state."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class PeriodicSweeper:
    """Run a synchronous sweep callable on a fixed interval.

    Each sweep runs in a worker thread so a slow sweep cannot stall the event
    loop; callables guard their own state with a lock. A failing sweep is
    logged and retried on the next tick.
    """

    def __init__(self, name: str, sweep: Callable[[], int], interval_seconds: float) -> None:
        self.name = name
        self._sweep = sweep
        self._interval = max(0.01, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name=f"sweeper:{self.name}")
        logger.debug("Started %s sweeper (every %.0fs)", self.name, self._interval)

    async def stop(self) -> None:
        """Stop the background sweep loop and wait for it to exit."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None
        logger.debug("Stopped %s sweeper", self.name)

    def run_once(self) -> int:
        """Invoke the sweep immediately and return the number of purged entries."""
        removed = self._sweep()
        if removed:
            logger.debug("%s sweep removed %d entries", self.name, removed)
        return removed

    async def _run(self) -> None:
        while not self._stopping.is_set():
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stopping.wait(), timeout=self._interval)
            if self._stopping.is_set():
                return
            try:
                await asyncio.to_thread(self.run_once)
            except Exception:
                logger.exception("%s sweep failed", self.name)
