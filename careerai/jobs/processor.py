"""Job processor: owns the job lifecycle state machine.

    pending -> processing -> completed | failed

The claim (pending -> processing) is an atomic conditional update in the
store, so ``process_one`` can be triggered any number of times from any
number of places (inline trigger, scheduled poller, another worker) and the
handler still runs at most once. Failures are terminal: handlers wrap paid,
non-idempotent AI calls, so nothing is retried automatically.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional, Union

from careerai.jobs.errors import HandlerError, InvalidTransition, UnknownJobType
from careerai.jobs.models import ACTIVE_STATUSES, JobRecord, JobStatus, JobType, utcnow
from careerai.jobs.registry import HandlerContext, HandlerRegistry
from careerai.jobs.store import JobStore
from careerai.notifications.emitter import NotificationEmitter

logger = logging.getLogger(__name__)


def describe_error(exc: BaseException) -> str:
    """Human-readable failure text stored on the job."""
    message = str(exc).strip()
    return message or type(exc).__name__


class JobProcessor:
    """Creates, claims, executes and finalises jobs."""

    def __init__(
        self,
        store: JobStore,
        registry: HandlerRegistry,
        notifier: Optional[NotificationEmitter] = None,
        handler_timeout: Optional[float] = None,
    ):
        self._store = store
        self._registry = registry
        self._notifier = notifier
        self._handler_timeout = handler_timeout

    @property
    def store(self) -> JobStore:
        return self._store

    async def create_job(
        self,
        user_id: str,
        job_type: Union[JobType, str],
        input_data: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Persist a new pending job. Raises UnknownJobType before touching the store."""
        kind = self._registry.resolve(job_type)
        job_id = await self._store.create(user_id, kind, input_data, metadata)
        logger.info("Created %s job %s for user %s", kind.value, job_id, user_id)
        return job_id

    async def process_one(self, job_id: str) -> Optional[JobRecord]:
        """Claim and run a single job.

        No-op (returns None) when the job is missing, already claimed, or
        terminal. Returns the terminal record otherwise.
        """
        job = await self._store.get(job_id)
        if job is None:
            logger.warning("Job %s not found, nothing to process", job_id)
            return None
        if job.status != JobStatus.PENDING:
            logger.debug("Job %s is %s, skipping", job_id, job.status.value)
            return None

        claimed = await self._store.claim(job_id)
        if claimed is None:
            logger.debug("Job %s was claimed by another worker", job_id)
            return None
        return await self._run_claimed(claimed)

    async def process_pending_jobs(self, batch_size: int = 1) -> List[JobRecord]:
        """Claim up to ``batch_size`` pending jobs and run them concurrently."""
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        jobs = await self._store.claim_batch(batch_size)
        if not jobs:
            return []

        logger.info("Processing %d pending job(s)", len(jobs))
        outcomes = await asyncio.gather(
            *(self._run_claimed(job) for job in jobs),
            return_exceptions=True,
        )

        finished = []
        for job, outcome in zip(jobs, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Job %s could not be finalised: %s",
                    job.id,
                    describe_error(outcome),
                )
            elif outcome is not None:
                finished.append(outcome)
        return finished

    async def get_status(self, job_id: str) -> Optional[JobRecord]:
        return await self._store.get(job_id)

    async def list_active(self, user_id: str) -> List[JobRecord]:
        return await self._store.list_for_user(user_id, statuses=ACTIVE_STATUSES)

    async def fail_stale_jobs(self, max_age: timedelta) -> int:
        """Fail jobs stuck in processing longer than ``max_age``.

        Covers workers that crashed mid-job. Returns the number of jobs failed.
        """
        stale = await self._store.find_stale(utcnow() - max_age)
        minutes = int(max_age.total_seconds() // 60)
        failed = 0
        for job in stale:
            try:
                finished = await self._store.fail(
                    job.id, f"Job timed out: no progress for {minutes} minutes"
                )
            except InvalidTransition:
                # Finished between the query and the update
                continue
            failed += 1
            logger.warning("Failed stale job %s (started %s)", job.id, job.started_at)
            await self._notify(finished)
        return failed

    async def _run_claimed(self, job: JobRecord) -> Optional[JobRecord]:
        """Execute a job that is already in ``processing`` and record the outcome."""
        try:
            result = await self._invoke(job)
        except Exception as e:
            logger.warning(
                "Job %s (%s) failed: %s", job.id, job.type.value, describe_error(e)
            )
            finished = await self._record_outcome(
                self._store.fail, job.id, self._failure_message(e)
            )
        else:
            logger.info("Job %s (%s) completed", job.id, job.type.value)
            finished = await self._record_outcome(self._store.complete, job.id, result)

        if finished is not None:
            await self._notify(finished)
        return finished

    async def _invoke(self, job: JobRecord) -> Dict[str, Any]:
        handler = self._registry.get(job.type)
        if handler is None:
            raise UnknownJobType(job.type.value)

        context = HandlerContext(
            job_id=job.id,
            user_id=job.user_id,
            job_type=job.type,
            metadata=dict(job.metadata),
        )
        call = handler(dict(job.input_data), context)
        if self._handler_timeout:
            result = await asyncio.wait_for(call, timeout=self._handler_timeout)
        else:
            result = await call

        if not isinstance(result, dict):
            raise HandlerError(
                f"Handler for {job.type.value} returned {type(result).__name__}, expected dict"
            )
        return result

    def _failure_message(self, exc: Exception) -> str:
        if isinstance(exc, asyncio.TimeoutError) and self._handler_timeout:
            return f"Job timed out after {self._handler_timeout:g} seconds"
        return describe_error(exc)

    async def _record_outcome(self, op, job_id: str, value) -> Optional[JobRecord]:
        try:
            return await op(job_id, value)
        except InvalidTransition:
            logger.error(
                "Invariant violated while finalising job %s", job_id, exc_info=True
            )
            return None

    async def _notify(self, job: JobRecord) -> None:
        if self._notifier is not None:
            await self._notifier.notify_job_terminal(job)
