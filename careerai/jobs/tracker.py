"""Active-job tracking for clients.

A subscription over the caller's non-terminal jobs. It polls fast while the
user has pending/processing jobs and falls back to a slow heartbeat once
none remain. A push source (e.g. a realtime channel) can call ``wake`` to
trigger an immediate refresh.
"""

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, FrozenSet, List, Optional, Tuple

from careerai.jobs.models import JobRecord


@dataclass(frozen=True)
class PollingPolicy:
    """Seconds between polls, depending on whether jobs are active."""
    active_interval: float = 5.0
    idle_interval: float = 60.0

    def interval_for(self, active_count: int) -> float:
        return self.active_interval if active_count > 0 else self.idle_interval


# Fast polling while jobs run; the notification bell uses 3s / 60s
JOB_POLLING = PollingPolicy(active_interval=5.0, idle_interval=60.0)
NOTIFICATION_POLLING = PollingPolicy(active_interval=3.0, idle_interval=60.0)

ActiveJobFetcher = Callable[[str], Awaitable[List[JobRecord]]]


class ActiveJobTracker:
    """Yields the active job list whenever the set of (id, status) pairs changes."""

    def __init__(self, fetch: ActiveJobFetcher, policy: PollingPolicy = JOB_POLLING):
        self._fetch = fetch
        self._policy = policy
        self._last: Optional[FrozenSet[Tuple[str, str]]] = None
        self._stopped = False
        self._wakeup = asyncio.Event()

    @property
    def policy(self) -> PollingPolicy:
        return self._policy

    async def poll_once(self, user_id: str) -> Tuple[List[JobRecord], bool]:
        jobs = await self._fetch(user_id)
        key = frozenset((j.id, j.status.value) for j in jobs)
        changed = key != self._last
        self._last = key
        return jobs, changed

    async def watch(self, user_id: str) -> AsyncIterator[List[JobRecord]]:
        self._stopped = False
        while not self._stopped:
            jobs, changed = await self.poll_once(user_id)
            if changed:
                yield jobs
            if self._stopped:
                break
            await self._wait(self._policy.interval_for(len(jobs)))

    def wake(self) -> None:
        """Cut the current wait short (status-changed push event)."""
        self._wakeup.set()

    def stop(self) -> None:
        self._stopped = True
        self._wakeup.set()

    async def _wait(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
        self._wakeup.clear()
