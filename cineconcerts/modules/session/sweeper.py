"""Idle session sweeper: periodic eviction of inactive sessions."""

import asyncio
import contextlib
import logging
from typing import Callable, Optional

from .registry import SessionRegistry

logger = logging.getLogger("cineconcerts.session.sweeper")


class SessionSweeper:
    """Runs ``registry.sweep()`` every *interval* seconds.

    ``start()`` / ``stop()`` manage an asyncio background task. The sweep
    itself is a plain registry method, so tests call it directly with a
    literal timestamp instead of waiting on this loop.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        interval: float = 5 * 60,
        on_tick: Optional[Callable[[], None]] = None,
    ):
        self._registry = registry
        self._interval = interval
        self._on_tick = on_tick
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop. No-op if already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="session-sweeper")
        self._task.add_done_callback(_log_task_crash)
        logger.info("Session sweeper started (every %ss)", self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task:
            task = self._task
            self._task = None
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            logger.info("Session sweeper stopped")

    async def tick(self) -> None:
        """Run one sweep plus the optional hook."""
        evicted = await self._registry.sweep()
        if evicted:
            logger.info(
                "Swept %d idle session(s); %d live", len(evicted), self._registry.count
            )
        if self._on_tick is not None:
            self._on_tick()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Session sweep failed (continuing)")


def _log_task_crash(task: asyncio.Task) -> None:
    """Log if the sweep task dies unexpectedly."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Session sweeper crashed: %s", exc, exc_info=exc)
