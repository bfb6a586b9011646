"""Handler registry: maps each JobType to the coroutine that performs it."""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from careerai.jobs.errors import UnknownJobType
from careerai.jobs.models import JobType

logger = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    """Job identity passed alongside the payload."""
    job_id: str
    user_id: str
    job_type: JobType
    metadata: Dict[str, Any] = field(default_factory=dict)


# Type alias for handlers: fn(payload, context) -> result_data
JobHandler = Callable[[Dict[str, Any], HandlerContext], Awaitable[Dict[str, Any]]]


class HandlerRegistry:
    """Closed set of job kinds and their handlers.

    Adding a job kind means adding a JobType member and registering a
    handler for it; the processor's state machine is untouched.
    """

    def __init__(self):
        self._handlers: Dict[JobType, JobHandler] = {}

    def register(self, kind: JobType) -> Callable[[JobHandler], JobHandler]:
        def decorator(fn: JobHandler) -> JobHandler:
            self.add(kind, fn)
            return fn
        return decorator

    def add(self, kind: JobType, handler: JobHandler) -> None:
        kind = JobType(kind)
        if kind in self._handlers:
            logger.warning("Replacing handler for job type %s", kind.value)
        self._handlers[kind] = handler

    def resolve(self, kind: Union[JobType, str]) -> JobType:
        """Coerce untrusted input to a registered JobType or raise UnknownJobType."""
        try:
            job_type = JobType(kind)
        except ValueError:
            raise UnknownJobType(str(kind)) from None
        if job_type not in self._handlers:
            raise UnknownJobType(job_type.value)
        return job_type

    def get(self, kind: Union[JobType, str]) -> Optional[JobHandler]:
        try:
            return self._handlers.get(JobType(kind))
        except ValueError:
            return None

    def kinds(self) -> List[JobType]:
        return list(self._handlers)

    def __contains__(self, kind) -> bool:
        return self.get(kind) is not None
