"""Shared fixtures for the ingestion pipeline tests."""

import os
from typing import Any, Dict, List

import pytest

from bulk_ingest.db.stores import InMemoryJobStore, InMemoryResultStore
from bulk_ingest.jobs.errors import SourceUnavailable
from bulk_ingest.jobs.models import JobRecord
from bulk_ingest.storage.uploads import FileSource

# Tests never talk to Supabase.
os.environ.setdefault("JOB_STORE_BACKEND", "memory")


class FakeFileSource(FileSource):
    """Serves tables from a dict and records deletions."""

    def __init__(self, tables: Dict[str, List[List[Any]]] = None):
        self.tables = dict(tables or {})
        self.deleted: List[str] = []
        self.loaded: List[str] = []

    def load(self, reference: str) -> List[List[Any]]:
        self.loaded.append(reference)
        if reference not in self.tables:
            raise SourceUnavailable(reference, "file not found")
        return self.tables[reference]

    def exists(self, reference: str) -> bool:
        return reference in self.tables

    def delete(self, reference: str) -> None:
        self.deleted.append(reference)
        self.tables.pop(reference, None)


class RecordingJobStore(InMemoryJobStore):
    """Keeps a snapshot of every saved job, in save order."""

    def __init__(self):
        super().__init__()
        self.saves: List[JobRecord] = []

    async def save(self, job: JobRecord) -> JobRecord:
        result = await super().save(job)
        self.saves.append(job.model_copy(deep=True))
        return result


@pytest.fixture
def job_store():
    return RecordingJobStore()


@pytest.fixture
def result_store():
    return InMemoryResultStore()


@pytest.fixture
def file_source():
    return FakeFileSource()
