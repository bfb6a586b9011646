"""Resources referenced by jobs: resumes, job descriptions, generated documents
and job applications.

Creation endpoints read from here for validation and ownership checks;
handlers write their final results here.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from careerai.db.supabase_client import execute
from careerai.jobs.models import utcnow

DEFAULT_APPLICATION_STATUS = "to_apply"


class ResourceRepository(ABC):

    @abstractmethod
    async def get_resume(self, resume_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def latest_resume(self, user_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def get_job_description(self, job_description_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def insert_resume(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a parsed resume. Returns the stored row including ``id``."""
        ...

    @abstractmethod
    async def save_generated_document(
        self,
        user_id: str,
        job_description_id: Optional[str],
        document_type: str,
        file_name: str,
        content: str,
        document_id: Optional[str] = None,
    ) -> str:
        """Store a generated resume or cover letter. Returns the document id.

        Callers may choose ``document_id`` up front so the row can be removed
        even when the insert is interrupted.
        """
        ...

    @abstractmethod
    async def delete_generated_document(self, document_id: str) -> None:
        """Remove a generated document. Missing ids are ignored."""
        ...

    @abstractmethod
    async def upsert_application(
        self,
        user_id: str,
        job_description_id: str,
        resume_id: Optional[str] = None,
        cover_letter_id: Optional[str] = None,
    ) -> Tuple[Dict[str, Any], bool]:
        """Create or update the application for a job description.

        Returns (application, created).
        """
        ...


class SupabaseResourceRepository(ResourceRepository):

    def __init__(self, client):
        self._client = client

    async def _first(self, query) -> Optional[Dict[str, Any]]:
        response = await execute(query.limit(1))
        return response.data[0] if response.data else None

    async def get_resume(self, resume_id):
        return await self._first(
            self._client.table("resumes").select("*").eq("id", resume_id)
        )

    async def latest_resume(self, user_id):
        return await self._first(
            self._client.table("resumes")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )

    async def get_job_description(self, job_description_id):
        return await self._first(
            self._client.table("job_descriptions").select("*").eq("id", job_description_id)
        )

    async def insert_resume(self, row):
        response = await execute(self._client.table("resumes").insert(row))
        return response.data[0]

    async def save_generated_document(
        self, user_id, job_description_id, document_type, file_name, content,
        document_id=None,
    ):
        row = {
            "user_id": user_id,
            "job_description_id": job_description_id,
            "document_type": document_type,
            "file_name": file_name,
            "content": content,
        }
        if document_id:
            row["id"] = document_id
        response = await execute(
            self._client.table("generated_documents").insert(row)
        )
        return response.data[0]["id"]

    async def delete_generated_document(self, document_id):
        await execute(
            self._client.table("generated_documents").delete().eq("id", document_id)
        )

    async def upsert_application(
        self, user_id, job_description_id, resume_id=None, cover_letter_id=None
    ):
        table = "job_applications"
        existing = await self._first(
            self._client.table(table)
            .select("*")
            .eq("user_id", user_id)
            .eq("job_description_id", job_description_id)
        )
        now = utcnow().isoformat()

        if existing is None:
            row = {
                "user_id": user_id,
                "job_description_id": job_description_id,
                "status": DEFAULT_APPLICATION_STATUS,
                "created_at": now,
                "updated_at": now,
            }
            if resume_id:
                row["resume_id"] = resume_id
            if cover_letter_id:
                row["cover_letter_id"] = cover_letter_id
            response = await execute(self._client.table(table).insert(row))
            return response.data[0], True

        changes = _document_changes(existing, resume_id, cover_letter_id)
        if not changes:
            return existing, False
        changes["updated_at"] = now
        response = await execute(
            self._client.table(table).update(changes).eq("id", existing["id"])
        )
        return (response.data[0] if response.data else {**existing, **changes}), False


def _document_changes(
    existing: Dict[str, Any],
    resume_id: Optional[str],
    cover_letter_id: Optional[str],
) -> Dict[str, Any]:
    changes = {}
    if resume_id and resume_id != existing.get("resume_id"):
        changes["resume_id"] = resume_id
    if cover_letter_id and cover_letter_id != existing.get("cover_letter_id"):
        changes["cover_letter_id"] = cover_letter_id
    return changes


class InMemoryResourceRepository(ResourceRepository):
    """Table-per-dict repository for local development and tests."""

    def __init__(self):
        self.resumes: Dict[str, Dict[str, Any]] = {}
        self.job_descriptions: Dict[str, Dict[str, Any]] = {}
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.applications: Dict[str, Dict[str, Any]] = {}

    @staticmethod
    def _stamp(row: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(row)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", utcnow().isoformat())
        return row

    def add_resume(self, **row) -> Dict[str, Any]:
        row = self._stamp(row)
        self.resumes[row["id"]] = row
        return row

    def add_job_description(self, **row) -> Dict[str, Any]:
        row = self._stamp(row)
        self.job_descriptions[row["id"]] = row
        return row

    async def get_resume(self, resume_id):
        return self.resumes.get(resume_id)

    async def latest_resume(self, user_id):
        owned: List[Dict[str, Any]] = [
            r for r in self.resumes.values() if r.get("user_id") == user_id
        ]
        if not owned:
            return None
        return max(owned, key=lambda r: r["created_at"])

    async def get_job_description(self, job_description_id):
        return self.job_descriptions.get(job_description_id)

    async def insert_resume(self, row):
        return self.add_resume(**row)

    async def save_generated_document(
        self, user_id, job_description_id, document_type, file_name, content,
        document_id=None,
    ):
        row = {
            "user_id": user_id,
            "job_description_id": job_description_id,
            "document_type": document_type,
            "file_name": file_name,
            "content": content,
        }
        if document_id:
            row["id"] = document_id
        row = self._stamp(row)
        self.documents[row["id"]] = row
        return row["id"]

    async def delete_generated_document(self, document_id):
        self.documents.pop(document_id, None)

    async def upsert_application(
        self, user_id, job_description_id, resume_id=None, cover_letter_id=None
    ):
        for app in self.applications.values():
            if app["user_id"] == user_id and app["job_description_id"] == job_description_id:
                changes = _document_changes(app, resume_id, cover_letter_id)
                if changes:
                    app.update(changes, updated_at=utcnow().isoformat())
                return app, False

        row = self._stamp({
            "user_id": user_id,
            "job_description_id": job_description_id,
            "status": DEFAULT_APPLICATION_STATUS,
            "resume_id": resume_id,
            "cover_letter_id": cover_letter_id,
        })
        row["updated_at"] = row["created_at"]
        self.applications[row["id"]] = row
        return row, True
