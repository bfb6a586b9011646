"""Job status API: poll a single job or list the caller's active jobs."""

from fastapi import APIRouter, Depends

from careerai.api.deps import get_services
from careerai.auth.supabase_auth import verify_jwt
from careerai.jobs.errors import ForbiddenError, NotFoundError
from careerai.jobs.tracker import JOB_POLLING
from careerai.services import Services

router = APIRouter()


@router.get("/jobs/active")
async def list_active_jobs(
    user_id: str = Depends(verify_jwt),
    services: Services = Depends(get_services),
):
    """The caller's pending and processing jobs, with a polling hint.

    Clients poll every ``pollAfterSeconds``: fast while jobs are active,
    a slow heartbeat otherwise.
    """
    jobs = await services.processor.list_active(user_id)
    return {
        "jobs": [job.snapshot() for job in jobs],
        "hasActiveJobs": bool(jobs),
        "pollAfterSeconds": JOB_POLLING.interval_for(len(jobs)),
    }


@router.get("/jobs/{job_id}")
async def get_job_status(
    job_id: str,
    user_id: str = Depends(verify_jwt),
    services: Services = Depends(get_services),
):
    """Get the current status and results of a job."""
    job = await services.processor.get_status(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    if job.user_id != user_id:
        raise ForbiddenError("Unauthorized")
    return job.snapshot()
