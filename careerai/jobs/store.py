"""Job store interface with Supabase and in-memory implementations.

Every state change is a conditional update ("set status=X where id=? and
status=Y"), so the row itself is the single source of truth for execution
rights. Claiming never relies on in-process locks: the inline processor and
the scheduled poller may live in different processes.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from careerai.db.supabase_client import execute
from careerai.jobs.errors import InvalidTransition, NotFoundError, StorageError
from careerai.jobs.models import JobRecord, JobStatus, JobType, utcnow

logger = logging.getLogger(__name__)


class JobStore(ABC):
    """Abstract persistence for job records."""

    @abstractmethod
    async def create(
        self,
        user_id: str,
        job_type: JobType,
        input_data: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Insert a pending job. Returns job_id."""
        ...

    @abstractmethod
    async def get(self, job_id: str) -> Optional[JobRecord]:
        ...

    @abstractmethod
    async def claim(self, job_id: str) -> Optional[JobRecord]:
        """Atomically move one job from pending to processing.

        Returns the claimed record, or None if the job was not pending
        (already claimed by someone else, terminal, or missing).
        """
        ...

    @abstractmethod
    async def claim_batch(self, limit: int) -> List[JobRecord]:
        """Claim up to ``limit`` pending jobs, oldest first. Returns [] when ``limit < 1``."""
        ...

    @abstractmethod
    async def complete(self, job_id: str, result_data: Dict[str, Any]) -> JobRecord:
        ...

    @abstractmethod
    async def fail(self, job_id: str, error_message: str) -> JobRecord:
        ...

    @abstractmethod
    async def list_for_user(
        self,
        user_id: str,
        statuses: Optional[Iterable[JobStatus]] = None,
        limit: Optional[int] = None,
    ) -> List[JobRecord]:
        """Owner-scoped listing, newest first."""
        ...

    @abstractmethod
    async def find_stale(self, started_before: datetime) -> List[JobRecord]:
        """Jobs still processing that were claimed before the cutoff."""
        ...


class SupabaseJobStore(JobStore):
    """Job store backed by the ``job_processing`` table."""

    def __init__(self, client, table: str = "job_processing"):
        self._client = client
        self._table = table

    def _query(self):
        return self._client.table(self._table)

    async def create(self, user_id, job_type, input_data, metadata=None) -> str:
        response = await execute(
            self._query().insert({
                "user_id": user_id,
                "type": JobType(job_type).value,
                "status": JobStatus.PENDING.value,
                "input_data": input_data,
                "metadata": metadata or {},
                "created_at": utcnow().isoformat(),
            })
        )
        if not response.data:
            raise StorageError("Insert into job_processing returned no row")
        return response.data[0]["id"]

    async def get(self, job_id: str) -> Optional[JobRecord]:
        response = await execute(
            self._query().select("*").eq("id", job_id).limit(1)
        )
        if not response.data:
            return None
        return JobRecord.from_row(response.data[0])

    async def claim(self, job_id: str) -> Optional[JobRecord]:
        response = await execute(
            self._query()
            .update({
                "status": JobStatus.PROCESSING.value,
                "started_at": utcnow().isoformat(),
            })
            .eq("id", job_id)
            .eq("status", JobStatus.PENDING.value)
        )
        if not response.data:
            return None
        return JobRecord.from_row(response.data[0])

    async def claim_batch(self, limit: int) -> List[JobRecord]:
        if limit < 1:
            return []
        response = await execute(
            self._query()
            .select("id")
            .eq("status", JobStatus.PENDING.value)
            .order("created_at")
            .limit(limit)
        )
        claimed = []
        for row in response.data or []:
            job = await self.claim(row["id"])
            if job is not None:
                claimed.append(job)
        return claimed

    async def _finish(
        self, job_id: str, status: JobStatus, fields: Dict[str, Any]
    ) -> JobRecord:
        response = await execute(
            self._query()
            .update({
                "status": status.value,
                "completed_at": utcnow().isoformat(),
                **fields,
            })
            .eq("id", job_id)
            .eq("status", JobStatus.PROCESSING.value)
        )
        if response.data:
            return JobRecord.from_row(response.data[0])

        if await self.get(job_id) is None:
            raise NotFoundError(f"Job {job_id} not found")
        raise InvalidTransition(job_id, JobStatus.PROCESSING.value, status.value)

    async def complete(self, job_id, result_data) -> JobRecord:
        return await self._finish(
            job_id, JobStatus.COMPLETED, {"result_data": result_data}
        )

    async def fail(self, job_id, error_message) -> JobRecord:
        return await self._finish(
            job_id, JobStatus.FAILED, {"error_message": error_message}
        )

    async def list_for_user(self, user_id, statuses=None, limit=None) -> List[JobRecord]:
        query = self._query().select("*").eq("user_id", user_id)
        if statuses is not None:
            query = query.in_("status", [JobStatus(s).value for s in statuses])
        query = query.order("created_at", desc=True)
        if limit is not None:
            query = query.limit(limit)
        response = await execute(query)
        return [JobRecord.from_row(row) for row in response.data or []]

    async def find_stale(self, started_before: datetime) -> List[JobRecord]:
        response = await execute(
            self._query()
            .select("*")
            .eq("status", JobStatus.PROCESSING.value)
            .lt("started_at", started_before.isoformat())
        )
        return [JobRecord.from_row(row) for row in response.data or []]


class InMemoryJobStore(JobStore):
    """Dict-backed store for local development and tests.

    Conditional updates run without an intervening await, which makes them
    atomic under asyncio. Records are copied in and out so callers never
    share mutable state with the store.
    """

    def __init__(self):
        self._jobs: Dict[str, JobRecord] = {}

    def _transition(
        self, job_id: str, expected: JobStatus, **changes
    ) -> Optional[JobRecord]:
        job = self._jobs.get(job_id)
        if job is None or job.status != expected:
            return None
        updated = job.model_copy(update=changes)
        self._jobs[job_id] = updated
        return updated.model_copy(deep=True)

    async def create(self, user_id, job_type, input_data, metadata=None) -> str:
        job = JobRecord(
            user_id=user_id,
            type=JobType(job_type),
            input_data=dict(input_data),
            metadata=dict(metadata or {}),
        )
        self._jobs[job.id] = job
        return job.id

    async def get(self, job_id: str) -> Optional[JobRecord]:
        job = self._jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    async def claim(self, job_id: str) -> Optional[JobRecord]:
        return self._transition(
            job_id,
            JobStatus.PENDING,
            status=JobStatus.PROCESSING,
            started_at=utcnow(),
        )

    async def claim_batch(self, limit: int) -> List[JobRecord]:
        if limit < 1:
            return []
        pending = sorted(
            (j for j in self._jobs.values() if j.status == JobStatus.PENDING),
            key=lambda j: j.created_at,
        )[:limit]
        # Selection and claim are separate round-trips against a real database
        await asyncio.sleep(0)
        claimed = []
        for job in pending:
            record = await self.claim(job.id)
            if record is not None:
                claimed.append(record)
        return claimed

    async def _finish(self, job_id: str, status: JobStatus, **fields) -> JobRecord:
        updated = self._transition(
            job_id,
            JobStatus.PROCESSING,
            status=status,
            completed_at=utcnow(),
            **fields,
        )
        if updated is not None:
            return updated
        if job_id not in self._jobs:
            raise NotFoundError(f"Job {job_id} not found")
        raise InvalidTransition(job_id, JobStatus.PROCESSING.value, status.value)

    async def complete(self, job_id, result_data) -> JobRecord:
        return await self._finish(job_id, JobStatus.COMPLETED, result_data=result_data)

    async def fail(self, job_id, error_message) -> JobRecord:
        return await self._finish(job_id, JobStatus.FAILED, error_message=error_message)

    async def list_for_user(self, user_id, statuses=None, limit=None) -> List[JobRecord]:
        wanted = {JobStatus(s) for s in statuses} if statuses is not None else None
        jobs = [
            j for j in self._jobs.values()
            if j.user_id == user_id and (wanted is None or j.status in wanted)
        ]
        jobs.sort(key=lambda j: j.created_at, reverse=True)
        if limit is not None:
            jobs = jobs[:limit]
        return [j.model_copy(deep=True) for j in jobs]

    async def find_stale(self, started_before: datetime) -> List[JobRecord]:
        return [
            j.model_copy(deep=True)
            for j in self._jobs.values()
            if j.status == JobStatus.PROCESSING
            and j.started_at is not None
            and j.started_at < started_before
        ]
