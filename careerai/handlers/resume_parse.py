"""Resume parsing job: extracted resume text -> structured resume row."""

import logging
import time
from typing import Any, Dict

from careerai.ai.client import TextGenerator
from careerai.ai.parsing import extract_json, normalize_parsed_resume
from careerai.ai.prompts import RESUME_PARSE_SYSTEM_PROMPT, build_resume_parse_prompt
from careerai.db.resources import ResourceRepository
from careerai.jobs.errors import HandlerError
from careerai.jobs.models import utcnow
from careerai.jobs.registry import HandlerContext

logger = logging.getLogger(__name__)


class ResumeParseHandler:
    """Parses resume text with the AI model and stores the result.

    Payload: ``{content, filename, userId}``. The resume row is inserted as
    the last step so a failed parse leaves nothing behind.
    """

    def __init__(self, resources: ResourceRepository, generate_text: TextGenerator):
        self._resources = resources
        self._generate_text = generate_text

    async def __call__(self, payload: Dict[str, Any], context: HandlerContext) -> Dict[str, Any]:
        content = payload.get("content") or ""
        if not content.strip():
            raise HandlerError("No resume text to parse")
        filename = payload.get("filename") or "resume.pdf"

        logger.info(
            "Parsing resume for job %s (%d characters)", context.job_id, len(content)
        )
        started = time.monotonic()
        response = await self._generate_text(
            build_resume_parse_prompt(content), RESUME_PARSE_SYSTEM_PROMPT
        )
        logger.info(
            "AI response for job %s received in %.1fs", context.job_id, time.monotonic() - started
        )

        try:
            parsed = normalize_parsed_resume(extract_json(response))
        except ValueError as e:
            raise HandlerError("Failed to parse AI response as JSON") from e

        timestamp = utcnow().strftime("%Y-%m-%dT%H-%M-%S")
        resume = await self._resources.insert_resume({
            "user_id": context.user_id,
            "file_path": f"resumes/{context.user_id}/{timestamp}_{filename}",
            "file_name": filename,
            "file_type": context.metadata.get("fileType", "application/pdf"),
            "file_size": context.metadata.get("fileSize", 0),
            "extracted_text": content,
            "processing_status": "completed",
            "ai_provider": getattr(self._generate_text, "provider_name", "unknown"),
            "ai_model": getattr(self._generate_text, "model_name", "unknown"),
            "parsed_data": parsed,
        })
        return {**parsed, "resumeId": resume["id"]}
