"""Job record data model for async ingestion."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
import uuid


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"


class RowError(BaseModel):
    """One problem found in a source row. Row 0 marks a whole-job failure."""
    row: int
    col: int
    message: Optional[str] = None


class JobRecord(BaseModel):
    """Tracks the lifecycle of one submitted file."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    source_file: str
    mapping_format: str = "default"
    status: JobStatus = JobStatus.PENDING
    total_rows: int = Field(default=0, ge=0)
    processed_rows: int = Field(default=0, ge=0)
    errors: List[RowError] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()

    def add_failure(self, exc: BaseException) -> None:
        """Force the job to DONE with a single synthetic row-0 error."""
        self.status = JobStatus.DONE
        self.errors.append(
            RowError(row=0, col=0, message=f"Processing failed: {exc}")
        )


class ProcessedDataSet(BaseModel):
    """Successfully mapped records of one job. Written once."""
    job_id: str
    records: List[Dict[str, Any]] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
