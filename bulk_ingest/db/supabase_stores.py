"""Supabase-backed job and result stores.

The supabase client is synchronous, so every query runs in the default
thread executor to keep the event loop free for the worker and HTTP handlers.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

from supabase import Client, create_client

from bulk_ingest.db.stores import JobStore, ResultStore
from bulk_ingest.jobs.models import JobRecord, JobStatus, ProcessedDataSet

_clients: Dict[tuple, Client] = {}


def get_supabase(url: str, service_role_key: str) -> Client:
    """Get or create a service-role client for the given project."""
    if not url or not service_role_key:
        raise RuntimeError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set"
        )
    key = (url, service_role_key)
    if key not in _clients:
        _clients[key] = create_client(url, service_role_key)
    return _clients[key]


async def _run(fn: Callable[[], Any]) -> Any:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, fn)


class SupabaseJobStore(JobStore):

    def __init__(self, client: Client, table: str = "tasks"):
        self._client = client
        self._table = table

    def _query(self):
        return self._client.table(self._table)

    async def create(self, job: JobRecord) -> JobRecord:
        job.touch()
        row = job.model_dump(mode="json")
        await _run(lambda: self._query().insert(row).execute())
        return job

    async def find_by_id(self, job_id: str) -> Optional[JobRecord]:
        response = await _run(
            lambda: self._query().select("*").eq("id", job_id).limit(1).execute()
        )
        if not response.data:
            return None
        return JobRecord.model_validate(response.data[0])

    async def find(self, status: Optional[JobStatus] = None) -> List[JobRecord]:
        def query():
            q = self._query().select("*")
            if status is not None:
                q = q.eq("status", status.value)
            return q.order("created_at").execute()

        response = await _run(query)
        return [JobRecord.model_validate(row) for row in response.data or []]

    async def save(self, job: JobRecord) -> JobRecord:
        job.touch()
        row = job.model_dump(mode="json", exclude={"id", "created_at"})
        await _run(lambda: self._query().update(row).eq("id", job.id).execute())
        return job


class SupabaseResultStore(ResultStore):

    def __init__(self, client: Client, table: str = "processed_data"):
        self._client = client
        self._table = table

    async def create(self, job_id: str, records: List[Dict[str, Any]]) -> ProcessedDataSet:
        if await self.find_by_job_id(job_id) is not None:
            raise ValueError(f"Processed data already exists for job {job_id}")
        data_set = ProcessedDataSet(job_id=job_id, records=list(records))
        row = data_set.model_dump(mode="json")
        await _run(lambda: self._client.table(self._table).insert(row).execute())
        return data_set

    async def find_by_job_id(self, job_id: str) -> Optional[ProcessedDataSet]:
        response = await _run(
            lambda: self._client.table(self._table)
            .select("*")
            .eq("job_id", job_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return ProcessedDataSet.model_validate(response.data[0])
