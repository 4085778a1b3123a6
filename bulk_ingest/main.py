"""Bulk Ingest Service - FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bulk_ingest.api.v1 import health as health_api
from bulk_ingest.api.v1 import jobs as jobs_api
from bulk_ingest.api.v1.health import router as health_root_router
from bulk_ingest.api.v1.router import v1_router
from bulk_ingest.config import settings
from bulk_ingest.logging_config import configure_logging
from bulk_ingest.pipeline import build_pipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    configure_logging(settings.log_level)

    logger.info(f"Starting Bulk Ingest Service on port {settings.service_port}")
    logger.info(f"Job store backend: {settings.job_store_backend}")
    logger.info(f"Upload dir: {settings.upload_dir}")

    pipeline = build_pipeline(settings)
    logger.info(f"Mapping formats: {pipeline.mapping_registry.formats()}")

    # Starts the worker and the recovery sweep (first sweep runs immediately)
    await pipeline.start()

    jobs_api.set_pipeline(pipeline)
    health_api.set_pipeline(pipeline)
    app.state.pipeline = pipeline

    yield

    logger.info("Shutting down Bulk Ingest Service")
    jobs_api.set_pipeline(None)
    health_api.set_pipeline(None)
    await pipeline.stop()


app = FastAPI(
    title="Bulk Ingest Service",
    description="Asynchronous ingestion of large tabular files into normalized records",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(health_root_router, tags=["health"])  # GET /health at root
app.include_router(v1_router)  # All /api/v1/* endpoints
