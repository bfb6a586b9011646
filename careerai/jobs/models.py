"""Job record data model for async processing."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


ACTIVE_STATUSES = (JobStatus.PENDING, JobStatus.PROCESSING)


class JobType(str, Enum):
    RESUME_PARSE = "resume_parse"
    RESUME_GENERATE = "resume_generate"
    COVER_LETTER_GENERATE = "cover_letter_generate"


class JobRecord(BaseModel):
    """Tracks the lifecycle of an async processing job.

    Maps one-to-one onto a row of the ``job_processing`` table.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    type: JobType
    status: JobStatus = JobStatus.PENDING
    input_data: Dict[str, Any] = Field(default_factory=dict)
    result_data: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "JobRecord":
        data = dict(row)
        # Nullable JSON columns come back as None
        data["input_data"] = data.get("input_data") or {}
        data["metadata"] = data.get("metadata") or {}
        return cls.model_validate(data)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def snapshot(self) -> Dict[str, Any]:
        """Client-visible view used by the status endpoints."""
        return {
            "id": self.id,
            "status": self.status.value,
            "type": self.type.value,
            "createdAt": self.created_at.isoformat(),
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "result": self.result_data,
            "error": self.error_message,
            "metadata": self.metadata,
        }
