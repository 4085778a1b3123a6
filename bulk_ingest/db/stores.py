"""Job and result store interfaces plus in-memory implementations."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from bulk_ingest.jobs.models import JobRecord, JobStatus, ProcessedDataSet


class JobStore(ABC):
    """Document store for job records. Last write wins per record."""

    @abstractmethod
    async def create(self, job: JobRecord) -> JobRecord:
        ...

    @abstractmethod
    async def find_by_id(self, job_id: str) -> Optional[JobRecord]:
        ...

    @abstractmethod
    async def find(self, status: Optional[JobStatus] = None) -> List[JobRecord]:
        """Return jobs, optionally filtered by status, oldest first."""
        ...

    @abstractmethod
    async def save(self, job: JobRecord) -> JobRecord:
        ...


class ResultStore(ABC):
    """Write-once store of processed data sets, keyed by job id."""

    @abstractmethod
    async def create(self, job_id: str, records: List[Dict[str, Any]]) -> ProcessedDataSet:
        ...

    @abstractmethod
    async def find_by_job_id(self, job_id: str) -> Optional[ProcessedDataSet]:
        ...


class InMemoryJobStore(JobStore):
    """Keeps copies of records, so a loaded job is a snapshot like a DB read."""

    def __init__(self):
        self._jobs: Dict[str, JobRecord] = {}

    async def create(self, job: JobRecord) -> JobRecord:
        if job.id in self._jobs:
            raise ValueError(f"Job already exists: {job.id}")
        job.touch()
        self._jobs[job.id] = job.model_copy(deep=True)
        return job

    async def find_by_id(self, job_id: str) -> Optional[JobRecord]:
        job = self._jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    async def find(self, status: Optional[JobStatus] = None) -> List[JobRecord]:
        jobs = sorted(self._jobs.values(), key=lambda j: j.created_at)
        if status is not None:
            jobs = [j for j in jobs if j.status == status]
        return [j.model_copy(deep=True) for j in jobs]

    async def save(self, job: JobRecord) -> JobRecord:
        job.touch()
        self._jobs[job.id] = job.model_copy(deep=True)
        return job


class InMemoryResultStore(ResultStore):

    def __init__(self):
        self._data: Dict[str, ProcessedDataSet] = {}

    async def create(self, job_id: str, records: List[Dict[str, Any]]) -> ProcessedDataSet:
        if job_id in self._data:
            raise ValueError(f"Processed data already exists for job {job_id}")
        data_set = ProcessedDataSet(job_id=job_id, records=list(records))
        self._data[job_id] = data_set
        return data_set.model_copy(deep=True)

    async def find_by_job_id(self, job_id: str) -> Optional[ProcessedDataSet]:
        data_set = self._data.get(job_id)
        return data_set.model_copy(deep=True) if data_set else None
