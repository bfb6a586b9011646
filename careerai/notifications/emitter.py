"""Writes user-visible notifications when jobs reach a terminal state.

Delivery is best-effort: a failed insert is logged and never rolls back
the job's terminal state.
"""

import logging
from typing import Any, Dict, Optional

from careerai.jobs.models import JobRecord, JobStatus, JobType
from careerai.notifications.models import NotificationRecord, NotificationType
from careerai.notifications.store import NotificationStore

logger = logging.getLogger(__name__)


# job type -> (success title, success message, failure title, failure message)
_MESSAGES = {
    JobType.RESUME_PARSE: (
        "Resume Parsed Successfully",
        "Your resume has been processed and is ready to view.",
        "Resume Parsing Failed",
        "There was an error processing your resume. Please try again.",
    ),
    JobType.RESUME_GENERATE: (
        "Resume Generated Successfully",
        "Your tailored resume for {company} is ready to download.",
        "Resume Generation Failed",
        "There was an error generating your resume. Please try again.",
    ),
    JobType.COVER_LETTER_GENERATE: (
        "Cover Letter Generated Successfully",
        "Your cover letter for {company} is ready to download.",
        "Cover Letter Generation Failed",
        "There was an error generating your cover letter. Please try again.",
    ),
}

# Result fields worth linking from the notification
_RESULT_LINKS = ("resumeId", "documentId", "fileName", "companyName")


def build_notification(job: JobRecord) -> NotificationRecord:
    """Construct (without persisting) the notification for a terminal job."""
    ok_title, ok_message, fail_title, fail_message = _MESSAGES[job.type]
    metadata: Dict[str, Any] = {"jobId": job.id, "jobType": job.type.value}

    if job.status == JobStatus.COMPLETED:
        result = job.result_data or {}
        company = (
            result.get("companyName")
            or job.metadata.get("companyName")
            or "the company"
        )
        metadata.update({k: result[k] for k in _RESULT_LINKS if k in result})
        if job.metadata.get("originalFileName"):
            metadata["filename"] = job.metadata["originalFileName"]
        return NotificationRecord(
            user_id=job.user_id,
            job_id=job.id,
            type=NotificationType.JOB_COMPLETED,
            title=ok_title,
            message=ok_message.format(company=company),
            metadata=metadata,
        )

    metadata["error"] = job.error_message or "Unknown error"
    return NotificationRecord(
        user_id=job.user_id,
        job_id=job.id,
        type=NotificationType.JOB_FAILED,
        title=fail_title,
        message=fail_message,
        metadata=metadata,
    )


class NotificationEmitter:
    """Only writer of notification records."""

    def __init__(self, store: NotificationStore):
        self._store = store

    async def notify_job_terminal(self, job: JobRecord) -> Optional[NotificationRecord]:
        if not job.status.is_terminal:
            logger.debug("Job %s is %s, no notification", job.id, job.status.value)
            return None

        try:
            notification = build_notification(job)
            return await self._store.create(notification)
        except Exception:
            logger.exception("Failed to write notification for job %s", job.id)
            return None
