"""Timer-driven poller that drains pending jobs in batches.

Used by long-running server deployments and the standalone worker. Ticks
never overlap: if the previous tick is still in flight, the new one is
skipped, which bounds database load regardless of the configured interval.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from careerai.jobs.processor import JobProcessor

logger = logging.getLogger(__name__)


class ScheduledPoller:
    """Runs ``process_pending_jobs`` every ``interval_seconds``."""

    def __init__(
        self,
        processor: JobProcessor,
        interval_seconds: float = 30.0,
        batch_size: int = 3,
        stale_after: Optional[timedelta] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._processor = processor
        self._interval = interval_seconds
        self._batch_size = batch_size
        self._stale_after = stale_after
        self._in_progress = False
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._tick_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    async def tick(self) -> bool:
        """Run one polling cycle. Returns False if skipped because one is in flight."""
        if self._in_progress:
            logger.info("Previous job processing tick still running, skipping")
            return False

        self._in_progress = True
        try:
            if self._stale_after is not None:
                try:
                    await self._processor.fail_stale_jobs(self._stale_after)
                except Exception:
                    logger.exception("Error while failing stale jobs")
            await self._processor.process_pending_jobs(self._batch_size)
        except Exception:
            logger.exception("Error in scheduled job processing")
        finally:
            self._in_progress = False
        return True

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "Job poller started (interval %.1fs, batch size %d)",
            self._interval,
            self._batch_size,
        )

    async def stop(self, grace_seconds: float = 5.0) -> None:
        """Stop scheduling ticks and give an in-flight tick ``grace_seconds`` to finish."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        tick = self._tick_task
        if tick is not None and not tick.done():
            logger.info("Waiting up to %.1fs for in-flight job tick", grace_seconds)
            done, _ = await asyncio.wait({tick}, timeout=grace_seconds)
            if not done:
                logger.warning("Job tick did not finish within grace period, cancelling")
                tick.cancel()
                try:
                    await tick
                except asyncio.CancelledError:
                    pass
        self._tick_task = None
        logger.info("Job poller stopped")

    async def _loop(self) -> None:
        """Spawn a tick immediately, then once per interval."""
        while self._running:
            if self._tick_task is None or self._tick_task.done():
                self._tick_task = asyncio.create_task(self.tick())
            else:
                logger.info("Previous job processing tick still running, skipping")
            try:
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break
