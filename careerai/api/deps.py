"""Shared FastAPI dependencies."""

from fastapi import HTTPException, Request

from careerai.services import Services


def get_services(request: Request) -> Services:
    """Services are attached to app.state by the application lifespan."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Job processor not initialized")
    return services
