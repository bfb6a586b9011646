"""Notification record data model."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
import uuid

from careerai.jobs.models import utcnow


class NotificationType(str, Enum):
    JOB_COMPLETED = "job_completed"
    JOB_FAILED = "job_failed"


class NotificationRecord(BaseModel):
    """User-visible event derived from a job's terminal transition."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    job_id: Optional[str] = None
    title: str
    message: str
    type: NotificationType
    read: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "NotificationRecord":
        data = dict(row)
        data["metadata"] = data.get("metadata") or {}
        return cls.model_validate(data)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
