"""Error taxonomy for the background job pipeline.

Creation-time errors (validation, ownership, unknown job type) are raised
synchronously to the HTTP caller. Execution-time errors are caught by the
JobProcessor and recorded on the job row instead.
"""


class JobPipelineError(Exception):
    """Base class for every error raised by the job pipeline."""


class ValidationError(JobPipelineError):
    """Caller supplied malformed or missing input. No job is created."""


class NotFoundError(JobPipelineError):
    """A referenced job, resume or job description does not exist."""


class UnauthorizedError(JobPipelineError):
    pass


class ForbiddenError(JobPipelineError):
    pass


class UnknownJobType(JobPipelineError):
    """Job type string has no registered handler."""

    def __init__(self, job_type: str):
        super().__init__(f"Unknown job type: {job_type}")
        self.job_type = job_type


class HandlerError(JobPipelineError):
    """The long-running operation itself failed (AI call, parse, persistence)."""


class InvalidTransition(JobPipelineError):
    """Attempt to move a job out of a state it is not in."""

    def __init__(self, job_id: str, expected: str, target: str):
        super().__init__(
            f"Job {job_id} is not '{expected}', cannot transition to '{target}'"
        )
        self.job_id = job_id
        self.expected = expected
        self.target = target


class StorageError(JobPipelineError):
    """Any persistence-layer failure."""
