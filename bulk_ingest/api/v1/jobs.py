"""Job API: submit an uploaded file, poll status, read errors and results."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional

from bulk_ingest.jobs.models import JobRecord, JobStatus

router = APIRouter()

# Set by main.py during lifespan
_pipeline = None


def set_pipeline(pipeline):
    global _pipeline
    _pipeline = pipeline


class JobSubmitRequest(BaseModel):
    source_file: str
    mapping_format: Optional[str] = None


class JobSubmitResponse(BaseModel):
    job_id: str
    status: str
    message: str


def _require_pipeline():
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Ingest pipeline not initialized")
    return _pipeline


async def _get_job(job_id: str) -> JobRecord:
    job = await _require_pipeline().job_store.find_by_id(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.post("/jobs", response_model=JobSubmitResponse, status_code=201)
async def submit_job(request: JobSubmitRequest):
    """Queue processing of a file already saved in the upload directory."""
    pipeline = _require_pipeline()

    if not pipeline.file_source.exists(request.source_file):
        raise HTTPException(status_code=400, detail="Source file not found")

    job = await pipeline.submit(request.source_file, request.mapping_format)
    return JobSubmitResponse(
        job_id=job.id,
        status=job.status.value,
        message="File queued for processing. Poll GET /api/v1/jobs/{id}/status for progress.",
    )


@router.get("/jobs/{job_id}/status")
async def get_job_status(job_id: str):
    job = await _get_job(job_id)
    return {
        "job_id": job.id,
        "status": job.status.value,
        "total_rows": job.total_rows,
        "processed_rows": job.processed_rows,
        "errors": len(job.errors),
        "created_at": job.created_at.isoformat(),
        "updated_at": job.updated_at.isoformat(),
    }


@router.get("/jobs/{job_id}/errors")
async def get_job_errors(job_id: str):
    job = await _get_job(job_id)
    return {
        "job_id": job.id,
        "errors": [e.model_dump() for e in job.errors],
        "total": len(job.errors),
    }


@router.get("/jobs/{job_id}/data")
async def get_job_data(job_id: str):
    """Mapped records of a finished job."""
    job = await _get_job(job_id)
    if job.status != JobStatus.DONE:
        raise HTTPException(
            status_code=400,
            detail=f"Job processing is not complete (status: {job.status.value})",
        )

    data_set = await _require_pipeline().result_store.find_by_job_id(job_id)
    if data_set is None:
        raise HTTPException(status_code=404, detail="Processed data not found")

    return {
        "job_id": job.id,
        "records": data_set.records,
        "total": len(data_set.records),
    }


@router.get("/mapping-formats")
async def list_mapping_formats():
    formats = _require_pipeline().mapping_registry.formats()
    return {"formats": formats, "count": len(formats)}
