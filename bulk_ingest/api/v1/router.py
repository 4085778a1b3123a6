"""Aggregate all v1 API routers."""

from fastapi import APIRouter
from bulk_ingest.api.v1.health import router as health_router
from bulk_ingest.api.v1.jobs import router as jobs_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(jobs_router, tags=["jobs"])
