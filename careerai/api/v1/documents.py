"""Async tailored resume / cover letter generation entry points."""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, ConfigDict, Field

from careerai.api.deps import get_services
from careerai.auth.supabase_auth import verify_jwt
from careerai.jobs.errors import ForbiddenError, NotFoundError
from careerai.jobs.models import JobType
from careerai.services import Services

logger = logging.getLogger(__name__)

router = APIRouter()


class GenerateDocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_description_id: str = Field(alias="jobDescriptionId")
    resume_id: Optional[str] = Field(default=None, alias="resumeId")


async def _create_generation_job(
    job_type: JobType,
    request: GenerateDocumentRequest,
    user_id: str,
    services: Services,
    background_tasks: BackgroundTasks,
) -> str:
    """Validate ownership of the referenced resources, then create the job."""
    job_description = await services.resources.get_job_description(
        request.job_description_id
    )
    if job_description is None:
        raise NotFoundError("Job description not found")
    if job_description.get("user_id") != user_id:
        raise ForbiddenError("This job description does not belong to you")

    if request.resume_id:
        resume = await services.resources.get_resume(request.resume_id)
        if resume is None or resume.get("user_id") != user_id:
            raise NotFoundError("Resume not found")
    else:
        resume = await services.resources.latest_resume(user_id)
        if resume is None:
            raise NotFoundError("No resume found. Please upload a resume first.")

    resume_data = resume.get("parsed_data") or {}
    company_name = job_description.get("company_name") or "Company"
    job_id = await services.processor.create_job(
        user_id,
        job_type,
        {
            "resumeData": resume_data,
            "jobDescription": job_description.get("parsed_data") or {},
            "userName": resume_data.get("name") or "Your Name",
            "companyName": company_name,
            "userId": user_id,
            "jobDescriptionId": request.job_description_id,
        },
        {
            "jobTitle": job_description.get("job_title"),
            "companyName": company_name,
        },
    )
    logger.info("Created %s job %s for %s", job_type.value, job_id, company_name)

    background_tasks.add_task(services.inline.run, job_id)
    return job_id


@router.post("/generate-resume-async")
async def generate_resume_async(
    request: GenerateDocumentRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(verify_jwt),
    services: Services = Depends(get_services),
):
    job_id = await _create_generation_job(
        JobType.RESUME_GENERATE, request, user_id, services, background_tasks
    )
    return {
        "success": True,
        "jobId": job_id,
        "status": "processing",
        "message": "Resume generation started. You will be notified when it's ready.",
    }


@router.post("/generate-cover-letter-async")
async def generate_cover_letter_async(
    request: GenerateDocumentRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(verify_jwt),
    services: Services = Depends(get_services),
):
    job_id = await _create_generation_job(
        JobType.COVER_LETTER_GENERATE, request, user_id, services, background_tasks
    )
    return {
        "success": True,
        "jobId": job_id,
        "status": "processing",
        "message": "Cover letter generation started. You will be notified when it's ready.",
    }
