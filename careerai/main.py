"""CareerAI job service - FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from careerai.api.v1.health import router as health_root_router
from careerai.api.v1.router import v1_router
from careerai.config import Settings, settings as default_settings
from careerai.jobs.errors import (
    ForbiddenError,
    JobPipelineError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
    UnknownJobType,
    ValidationError,
)
from careerai.logging_config import setup_logging
from careerai.services import Services, build_services

logger = logging.getLogger(__name__)

_STATUS_CODES = (
    (ValidationError, 400),
    (UnknownJobType, 400),
    (UnauthorizedError, 401),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (StorageError, 503),
)


async def pipeline_error_handler(request: Request, exc: JobPipelineError) -> JSONResponse:
    """Map creation-time pipeline errors onto HTTP responses."""
    status_code = next(
        (code for cls, code in _STATUS_CODES if isinstance(exc, cls)), 500
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[Services] = None,
) -> FastAPI:
    """Build the application. Injected ``services`` skip construction (tests)."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        logger.info("Starting CareerAI job service on port %d", settings.port)
        logger.info("Storage backend: %s", settings.storage_backend)

        svc = services or build_services(settings)
        app.state.services = svc

        if settings.job_poller_enabled:
            await svc.poller.start()
        else:
            logger.info("Scheduled job processing disabled; jobs are processed inline")

        yield

        logger.info("Shutting down CareerAI job service")
        await svc.poller.stop(settings.shutdown_grace_seconds)

    app = FastAPI(
        title="CareerAI Job Service",
        description="Background job pipeline for resume parsing and document generation",
        version="0.1.0",
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(JobPipelineError, pipeline_error_handler)

    app.include_router(health_root_router, tags=["health"])  # GET /health at root
    app.include_router(v1_router)  # All /api/v1/* endpoints
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("careerai.main:app", host="0.0.0.0", port=default_settings.port)
