"""Registry with the production handlers for every JobType."""

from careerai.ai.client import TextGenerator
from careerai.db.resources import ResourceRepository
from careerai.handlers.documents import DocumentGenerationHandler
from careerai.handlers.resume_parse import ResumeParseHandler
from careerai.jobs.models import JobType
from careerai.jobs.registry import HandlerRegistry


def build_default_registry(
    resources: ResourceRepository, generate_text: TextGenerator
) -> HandlerRegistry:
    registry = HandlerRegistry()
    registry.add(JobType.RESUME_PARSE, ResumeParseHandler(resources, generate_text))
    registry.add(
        JobType.RESUME_GENERATE,
        DocumentGenerationHandler("resume", resources, generate_text),
    )
    registry.add(
        JobType.COVER_LETTER_GENERATE,
        DocumentGenerationHandler("cover_letter", resources, generate_text),
    )
    return registry
