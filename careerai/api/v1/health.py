"""Health check endpoint."""

import platform
import sys

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Service health and job processing status."""
    services = getattr(request.app.state, "services", None)
    poller_running = services is not None and services.poller.running
    return {
        "status": "healthy",
        "jobProcessor": "enabled" if services is not None else "disabled",
        "poller": "running" if poller_running else "stopped",
        "python_version": sys.version,
        "platform": platform.platform(),
    }
