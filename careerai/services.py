"""Construction of the job pipeline's collaborators.

Everything is built once per process and passed explicitly; nothing in the
pipeline reaches for a global client.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from careerai.ai.client import TextGenerator, create_text_generator
from careerai.config import Settings
from careerai.db.resources import (
    InMemoryResourceRepository,
    ResourceRepository,
    SupabaseResourceRepository,
)
from careerai.db.supabase_client import create_supabase
from careerai.handlers.defaults import build_default_registry
from careerai.jobs.inline import InlineProcessor
from careerai.jobs.poller import ScheduledPoller
from careerai.jobs.processor import JobProcessor
from careerai.jobs.registry import HandlerRegistry
from careerai.jobs.store import InMemoryJobStore, JobStore, SupabaseJobStore
from careerai.notifications.emitter import NotificationEmitter
from careerai.notifications.store import (
    InMemoryNotificationStore,
    NotificationStore,
    SupabaseNotificationStore,
)

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    job_store: JobStore
    notification_store: NotificationStore
    resources: ResourceRepository
    processor: JobProcessor
    inline: InlineProcessor
    poller: ScheduledPoller


def build_services(
    settings: Settings,
    client=None,
    generate_text: Optional[TextGenerator] = None,
    registry: Optional[HandlerRegistry] = None,
) -> Services:
    """Wire stores, handlers, processor, inline trigger and poller."""
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage; jobs are lost on restart")
        job_store: JobStore = InMemoryJobStore()
        notification_store: NotificationStore = InMemoryNotificationStore()
        resources: ResourceRepository = InMemoryResourceRepository()
    elif settings.storage_backend == "supabase":
        client = client or create_supabase(settings)
        job_store = SupabaseJobStore(client)
        notification_store = SupabaseNotificationStore(client)
        resources = SupabaseResourceRepository(client)
    else:
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")

    if registry is None:
        if generate_text is None:
            generate_text = create_text_generator(settings)
        registry = build_default_registry(resources, generate_text)

    processor = JobProcessor(
        job_store,
        registry,
        notifier=NotificationEmitter(notification_store),
        handler_timeout=settings.job_handler_timeout_seconds,
    )
    stale_after = (
        timedelta(minutes=settings.job_stale_after_minutes)
        if settings.job_stale_after_minutes
        else None
    )
    poller = ScheduledPoller(
        processor,
        interval_seconds=settings.job_poll_interval_seconds,
        batch_size=settings.job_batch_size,
        stale_after=stale_after,
    )
    return Services(
        settings=settings,
        job_store=job_store,
        notification_store=notification_store,
        resources=resources,
        processor=processor,
        inline=InlineProcessor(processor),
        poller=poller,
    )
