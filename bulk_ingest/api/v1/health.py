"""Health check endpoint."""

from fastapi import APIRouter
import platform
import sys

router = APIRouter()

# Set by main.py during lifespan
_pipeline = None


def set_pipeline(pipeline):
    global _pipeline
    _pipeline = pipeline


@router.get("/health")
async def health_check():
    """Service health and worker state."""
    worker = None
    if _pipeline is not None:
        queue = _pipeline.queue
        worker = {
            "running": queue.running,
            "busy": queue.busy,
            "active_job_id": queue.active_job_id,
            "queued": queue.size,
        }

    return {
        "status": "healthy" if _pipeline is not None else "starting",
        "worker": worker,
        "python_version": sys.version,
        "platform": platform.platform(),
    }
