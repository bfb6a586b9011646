"""
Pytest configuration and shared fixtures for the job pipeline tests.
"""

import json

import pytest
from fastapi.testclient import TestClient

from careerai.ai.prompts import RESUME_PARSE_SYSTEM_PROMPT
from careerai.auth.supabase_auth import verify_jwt
from careerai.config import Settings
from careerai.db.resources import InMemoryResourceRepository
from careerai.jobs.errors import HandlerError
from careerai.jobs.processor import JobProcessor
from careerai.jobs.registry import HandlerRegistry
from careerai.jobs.store import InMemoryJobStore
from careerai.main import create_app
from careerai.notifications.emitter import NotificationEmitter
from careerai.notifications.store import InMemoryNotificationStore
from careerai.services import build_services

PARSED_RESUME = {
    "name": "John Doe",
    "title": "Software Engineer",
    "email": "john@example.com",
    "experience": [
        {
            "title": "Backend Engineer",
            "company": "Acme",
            "description": "Built payment APIs used by millions. Led the migration to the cloud platform.",
        }
    ],
    "skills": ["Python", "PostgreSQL"],
}


class FakeTextGenerator:
    """Stands in for the Anthropic client; records every prompt it receives."""

    provider_name = "fake"
    model_name = "fake-model"

    def __init__(self):
        self.calls = []
        self.parse_response = "```json\n" + json.dumps(PARSED_RESUME) + "\n```"
        self.document_response = "JOHN DOE\nSoftware Engineer\n\nTailored content."
        self.fail_with = None

    async def __call__(self, prompt, system_prompt=None):
        self.calls.append((prompt, system_prompt))
        if self.fail_with:
            raise HandlerError(self.fail_with)
        if system_prompt == RESUME_PARSE_SYSTEM_PROMPT:
            return self.parse_response
        return self.document_response


@pytest.fixture
def fake_ai():
    return FakeTextGenerator()


@pytest.fixture
def job_store():
    return InMemoryJobStore()


@pytest.fixture
def notification_store():
    return InMemoryNotificationStore()


@pytest.fixture
def resources():
    return InMemoryResourceRepository()


@pytest.fixture
def registry():
    """Empty registry; tests register the handlers they need."""
    return HandlerRegistry()


@pytest.fixture
def processor(job_store, registry, notification_store):
    return JobProcessor(
        job_store,
        registry,
        notifier=NotificationEmitter(notification_store),
    )


@pytest.fixture
def settings():
    return Settings(
        storage_backend="memory",
        job_poller_enabled=False,
        max_resume_chars=1000,
        job_handler_timeout_seconds=5.0,
    )


@pytest.fixture
def services(settings, fake_ai):
    return build_services(settings, generate_text=fake_ai)


@pytest.fixture
def app(settings, services):
    application = create_app(settings=settings, services=services)
    application.dependency_overrides[verify_jwt] = lambda: "user-1"
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
