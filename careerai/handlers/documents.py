"""Tailored resume and cover letter generation jobs."""

import asyncio
import logging
import re
import uuid
from typing import Any, Dict

from careerai.ai.client import TextGenerator
from careerai.ai.prompts import (
    COVER_LETTER_SYSTEM_PROMPT,
    RESUME_GENERATE_SYSTEM_PROMPT,
    build_cover_letter_prompt,
    build_resume_prompt,
)
from careerai.db.resources import ResourceRepository
from careerai.jobs.errors import HandlerError
from careerai.jobs.models import utcnow
from careerai.jobs.registry import HandlerContext

logger = logging.getLogger(__name__)

# document_type -> (system prompt, prompt builder)
_DOCUMENTS = {
    "resume": (RESUME_GENERATE_SYSTEM_PROMPT, build_resume_prompt),
    "cover_letter": (COVER_LETTER_SYSTEM_PROMPT, build_cover_letter_prompt),
}


def _slug(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "_", value).strip("_") or "Document"


def document_file_name(user_name: str, company_name: str, document_type: str) -> str:
    label = "Resume" if document_type == "resume" else "Cover_Letter"
    date = utcnow().strftime("%Y-%m-%d")
    return f"{_slug(user_name)}_{_slug(company_name)}_{label}_{date}.txt"


class DocumentGenerationHandler:
    """Generates a document for a job description and links it to the application.

    Payload: ``{resumeData, jobDescription, userName, companyName, userId,
    jobDescriptionId}``.
    """

    def __init__(
        self,
        document_type: str,
        resources: ResourceRepository,
        generate_text: TextGenerator,
    ):
        if document_type not in _DOCUMENTS:
            raise ValueError(f"Unsupported document type: {document_type}")
        self._document_type = document_type
        self._resources = resources
        self._generate_text = generate_text

    async def __call__(self, payload: Dict[str, Any], context: HandlerContext) -> Dict[str, Any]:
        resume_data = payload.get("resumeData")
        if not resume_data:
            raise HandlerError("Resume data is missing")
        job_description = payload.get("jobDescription") or {}
        user_name = payload.get("userName") or "Your Name"
        company_name = payload.get("companyName") or "Company"
        job_description_id = payload.get("jobDescriptionId")

        system_prompt, build_prompt = _DOCUMENTS[self._document_type]
        logger.info(
            "Generating %s for job %s (%s)", self._document_type, context.job_id, company_name
        )
        content = await self._generate_text(
            build_prompt(resume_data, job_description, user_name, company_name),
            system_prompt,
        )
        if not content.strip():
            raise HandlerError(f"AI returned an empty {self._document_type}")

        file_name = document_file_name(user_name, company_name, self._document_type)
        document_id = str(uuid.uuid4())
        try:
            await self._resources.save_generated_document(
                context.user_id,
                job_description_id,
                self._document_type,
                file_name,
                content,
                document_id=document_id,
            )
            if job_description_id:
                await self._link_application(
                    context.user_id, job_description_id, document_id
                )
        except (Exception, asyncio.CancelledError):
            await self._discard_document(document_id)
            raise

        return {
            "fileName": file_name,
            "documentId": document_id,
            "companyName": company_name,
        }

    async def _link_application(
        self, user_id: str, job_description_id: str, document_id: str
    ) -> None:
        link = (
            {"resume_id": document_id}
            if self._document_type == "resume"
            else {"cover_letter_id": document_id}
        )
        await self._resources.upsert_application(user_id, job_description_id, **link)

    async def _discard_document(self, document_id: str) -> None:
        try:
            await self._resources.delete_generated_document(document_id)
        except Exception:
            logger.exception("Could not remove generated document %s", document_id)
