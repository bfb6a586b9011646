"""Inline job processing for deployments without a separate worker.

Request handlers schedule ``InlineProcessor.run`` as a FastAPI background
task, which executes after the response has been sent. The creating request
has already returned, so errors here are logged and swallowed.
"""

import logging

from careerai.jobs.processor import JobProcessor

logger = logging.getLogger(__name__)


class InlineProcessor:

    def __init__(self, processor: JobProcessor):
        self._processor = processor

    async def run(self, job_id: str) -> None:
        """Process one just-created job. Never raises."""
        try:
            job = await self._processor.process_one(job_id)
        except Exception:
            logger.exception("Inline processing of job %s failed", job_id)
            return

        if job is not None:
            logger.info("Inline processing of job %s finished: %s", job_id, job.status.value)
