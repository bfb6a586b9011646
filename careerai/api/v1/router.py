"""Aggregate all v1 API routers."""

from fastapi import APIRouter
from careerai.api.v1.health import router as health_router
from careerai.api.v1.jobs import router as jobs_router
from careerai.api.v1.resumes import router as resumes_router
from careerai.api.v1.documents import router as documents_router
from careerai.api.v1.notifications import router as notifications_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(jobs_router, tags=["jobs"])
v1_router.include_router(resumes_router, tags=["resumes"])
v1_router.include_router(documents_router, tags=["documents"])
v1_router.include_router(notifications_router, tags=["notifications"])
