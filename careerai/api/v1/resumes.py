"""Async resume parsing entry point."""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, ConfigDict, Field

from careerai.api.deps import get_services
from careerai.auth.supabase_auth import verify_jwt
from careerai.jobs.errors import ValidationError
from careerai.jobs.models import JobType
from careerai.services import Services

logger = logging.getLogger(__name__)

router = APIRouter()


class ResumeParseRequest(BaseModel):
    """Text already extracted from the uploaded PDF/DOCX."""
    model_config = ConfigDict(populate_by_name=True)

    content: str
    filename: Optional[str] = None
    file_type: Optional[str] = Field(default=None, alias="fileType")
    file_size: int = Field(default=0, alias="fileSize", ge=0)


@router.post("/resumes/parse-async")
async def parse_resume_async(
    request: ResumeParseRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(verify_jwt),
    services: Services = Depends(get_services),
):
    """Create a resume_parse job and return its id immediately."""
    content = request.content.strip()
    if not content:
        raise ValidationError("No text could be extracted from the document")
    if len(content) > services.settings.max_resume_chars:
        raise ValidationError(
            f"Resume text exceeds {services.settings.max_resume_chars} characters"
        )

    filename = request.filename or "resume.pdf"
    job_id = await services.processor.create_job(
        user_id,
        JobType.RESUME_PARSE,
        {"content": content, "filename": filename, "userId": user_id},
        {
            "originalFileName": filename,
            "fileSize": request.file_size,
            "fileType": request.file_type or "application/pdf",
        },
    )
    logger.info("Created resume_parse job %s for %s (%d chars)", job_id, filename, len(content))

    # Runs after the response is sent
    background_tasks.add_task(services.inline.run, job_id)

    return {
        "success": True,
        "jobId": job_id,
        "status": "processing",
        "message": "Resume upload successful. Processing in background.",
    }
