import asyncio
from datetime import timedelta

import pytest

from careerai.jobs.errors import HandlerError, StorageError, UnknownJobType
from careerai.jobs.models import JobStatus, JobType, utcnow
from careerai.jobs.processor import JobProcessor
from careerai.jobs.registry import HandlerRegistry
from careerai.jobs.store import InMemoryJobStore
from careerai.notifications.emitter import NotificationEmitter
from careerai.notifications.models import NotificationType

pytestmark = pytest.mark.asyncio


class CountingHandler:

    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = {"name": "John Doe", "title": "Software Engineer"} if result is None else result
        self.error = error

    async def __call__(self, payload, context):
        self.calls.append((payload, context))
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        return self.result


async def test_create_job_rejects_unknown_type(processor, job_store):
    with pytest.raises(UnknownJobType, match="Unknown job type: resume_translate"):
        await processor.create_job("user-1", "resume_translate", {})

    assert await job_store.list_for_user("user-1") == []


async def test_create_job_rejects_type_without_handler(processor, job_store):
    with pytest.raises(UnknownJobType):
        await processor.create_job("user-1", JobType.RESUME_GENERATE, {})
    assert await job_store.list_for_user("user-1") == []


async def test_resume_parse_job_completes_with_handler_result(processor, registry):
    handler = CountingHandler()
    registry.add(JobType.RESUME_PARSE, handler)

    job_id = await processor.create_job(
        "user-1", "resume_parse", {"content": "resume text"}, {"originalFileName": "cv.pdf"}
    )
    job = await processor.process_one(job_id)

    assert job.status == JobStatus.COMPLETED
    assert job.result_data == {"name": "John Doe", "title": "Software Engineer"}
    assert job.error_message is None
    assert job.started_at <= job.completed_at

    payload, context = handler.calls[0]
    assert payload == {"content": "resume text"}
    assert context.job_id == job_id
    assert context.user_id == "user-1"
    assert context.metadata == {"originalFileName": "cv.pdf"}


@pytest.mark.parametrize(
    "error, expected",
    [(None, JobStatus.COMPLETED), (HandlerError("rate limit exceeded"), JobStatus.FAILED)],
)
async def test_process_one_is_noop_for_terminal_job(processor, registry, error, expected):
    handler = CountingHandler(error=error)
    registry.add(JobType.RESUME_PARSE, handler)
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})
    await processor.process_one(job_id)
    before = await processor.get_status(job_id)

    assert await processor.process_one(job_id) is None

    after = await processor.get_status(job_id)
    assert before.status == expected
    assert after == before
    assert len(handler.calls) == 1


async def test_process_one_missing_job_returns_none(processor):
    assert await processor.process_one("does-not-exist") is None


async def test_concurrent_triggers_run_handler_once(processor, registry):
    handler = CountingHandler()
    registry.add(JobType.RESUME_PARSE, handler)
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})

    outcomes = await asyncio.gather(*(processor.process_one(job_id) for _ in range(3)))

    assert len(handler.calls) == 1
    assert sum(outcome is not None for outcome in outcomes) == 1


async def test_failed_handler_marks_job_failed_and_notifies(
    processor, registry, notification_store
):
    registry.add(
        JobType.RESUME_PARSE, CountingHandler(error=HandlerError("rate limit exceeded"))
    )
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})

    job = await processor.process_one(job_id)

    assert job.status == JobStatus.FAILED
    assert job.error_message == "rate limit exceeded"
    assert job.result_data is None

    notifications = await notification_store.list_for_user("user-1")
    assert len(notifications) == 1
    assert notifications[0].type == NotificationType.JOB_FAILED
    assert notifications[0].job_id == job_id
    assert notifications[0].metadata["error"] == "rate limit exceeded"


async def test_completed_job_emits_exactly_one_notification(
    processor, registry, notification_store
):
    registry.add(JobType.RESUME_PARSE, CountingHandler())
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})

    await processor.process_one(job_id)
    await processor.process_one(job_id)

    notifications = await notification_store.list_for_user("user-1")
    assert [n.type for n in notifications] == [NotificationType.JOB_COMPLETED]


async def test_non_dict_result_fails_job(processor, registry):
    registry.add(JobType.RESUME_PARSE, CountingHandler(result=["not", "a", "dict"]))
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})

    job = await processor.process_one(job_id)

    assert job.status == JobStatus.FAILED
    assert "expected dict" in job.error_message


async def test_handler_timeout_fails_job(job_store, registry):
    async def slow(payload, context):
        await asyncio.sleep(5)
        return {}

    registry.add(JobType.RESUME_PARSE, slow)
    processor = JobProcessor(job_store, registry, handler_timeout=0.05)
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})

    job = await processor.process_one(job_id)

    assert job.status == JobStatus.FAILED
    assert job.error_message == "Job timed out after 0.05 seconds"


async def test_process_pending_jobs_respects_batch_size(processor, registry, job_store):
    registry.add(JobType.RESUME_PARSE, CountingHandler())
    ids = [await processor.create_job("user-1", JobType.RESUME_PARSE, {}) for _ in range(5)]

    finished = await processor.process_pending_jobs(2)

    assert [j.id for j in finished] == ids[:2]
    statuses = [(await job_store.get(job_id)).status for job_id in ids]
    assert statuses.count(JobStatus.COMPLETED) == 2
    assert statuses.count(JobStatus.PENDING) == 3


async def test_process_pending_jobs_isolates_failures(processor, registry, job_store):
    registry.add(JobType.RESUME_PARSE, CountingHandler(error=RuntimeError("boom")))
    registry.add(JobType.RESUME_GENERATE, CountingHandler(result={"documentId": "d1"}))
    failing = await processor.create_job("user-1", JobType.RESUME_PARSE, {})
    passing = await processor.create_job("user-1", JobType.RESUME_GENERATE, {})

    finished = await processor.process_pending_jobs(5)

    assert {j.id: j.status for j in finished} == {
        failing: JobStatus.FAILED,
        passing: JobStatus.COMPLETED,
    }


async def test_process_pending_jobs_with_empty_queue(processor):
    assert await processor.process_pending_jobs(3) == []


async def test_list_active_excludes_terminal_jobs(processor, registry):
    registry.add(JobType.RESUME_PARSE, CountingHandler())
    done = await processor.create_job("user-1", JobType.RESUME_PARSE, {})
    waiting = await processor.create_job("user-1", JobType.RESUME_PARSE, {})
    await processor.process_one(done)

    active = await processor.list_active("user-1")

    assert [j.id for j in active] == [waiting]


async def test_fail_stale_jobs(processor, registry, job_store, notification_store):
    registry.add(JobType.RESUME_PARSE, CountingHandler())
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})
    await job_store.claim(job_id)
    job_store._jobs[job_id] = job_store._jobs[job_id].model_copy(
        update={"started_at": utcnow() - timedelta(hours=1)}
    )

    assert await processor.fail_stale_jobs(timedelta(minutes=15)) == 1

    job = await job_store.get(job_id)
    assert job.status == JobStatus.FAILED
    assert job.error_message == "Job timed out: no progress for 15 minutes"
    assert len(await notification_store.list_for_user("user-1")) == 1


async def test_notification_failure_does_not_affect_job(job_store, registry):
    class BrokenNotificationStore:
        async def create(self, notification):
            raise StorageError("notifications table unavailable")

    registry.add(JobType.RESUME_PARSE, CountingHandler())
    processor = JobProcessor(
        job_store, registry, notifier=NotificationEmitter(BrokenNotificationStore())
    )
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})

    job = await processor.process_one(job_id)

    assert job.status == JobStatus.COMPLETED
    assert (await job_store.get(job_id)).status == JobStatus.COMPLETED


async def test_storage_error_while_finalising_propagates():
    class FlakyStore(InMemoryJobStore):
        async def complete(self, job_id, result_data):
            raise StorageError("connection reset")

    store = FlakyStore()
    registry = HandlerRegistry()
    registry.add(JobType.RESUME_PARSE, CountingHandler())
    processor = JobProcessor(store, registry)
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})

    with pytest.raises(StorageError):
        await processor.process_one(job_id)
    assert (await store.get(job_id)).status == JobStatus.PROCESSING



@pytest.mark.parametrize("batch_size", [0, -1])
async def test_process_pending_jobs_rejects_non_positive_batch(processor, registry, job_store, batch_size):
    registry.add(JobType.RESUME_PARSE, CountingHandler())
    job_id = await processor.create_job("user-1", JobType.RESUME_PARSE, {})

    with pytest.raises(ValueError):
        await processor.process_pending_jobs(batch_size)
    assert (await job_store.get(job_id)).status == JobStatus.PENDING
