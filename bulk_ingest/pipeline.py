"""Wiring of stores, file source, engine, queue and recovery sweep.

Each IngestPipeline owns its own queue and sweep, so several pipelines
(e.g., one per test) never interfere.
"""

import logging
from typing import Optional, Tuple

from bulk_ingest.config import Settings
from bulk_ingest.db.stores import (
    InMemoryJobStore,
    InMemoryResultStore,
    JobStore,
    ResultStore,
)
from bulk_ingest.jobs.in_process_queue import InProcessQueue
from bulk_ingest.jobs.models import JobRecord
from bulk_ingest.jobs.recovery import DEFAULT_INTERVAL_SECONDS, RecoverySweep
from bulk_ingest.mapping.registry import MappingRegistry, registry as default_registry
from bulk_ingest.processing.engine import DEFAULT_CHUNK_SIZE, RowProcessingEngine
from bulk_ingest.storage.uploads import FileSource, LocalFileSource

logger = logging.getLogger(__name__)


class IngestPipeline:

    def __init__(
        self,
        job_store: JobStore,
        result_store: ResultStore,
        file_source: FileSource,
        mapping_registry: Optional[MappingRegistry] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        recovery_interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        default_mapping_format: str = "default",
    ):
        self.job_store = job_store
        self.result_store = result_store
        self.file_source = file_source
        self.default_mapping_format = default_mapping_format
        self.mapping_registry = mapping_registry or default_registry
        self.engine = RowProcessingEngine(
            job_store,
            result_store,
            file_source,
            mapping_registry=self.mapping_registry,
            chunk_size=chunk_size,
        )
        self.queue = InProcessQueue(self.engine.process, job_store)
        self.sweep = RecoverySweep(job_store, self.queue, recovery_interval_seconds)

    async def start(self) -> None:
        await self.queue.start()
        await self.sweep.start()
        logger.info("Ingest pipeline started")

    async def stop(self) -> None:
        await self.sweep.stop()
        await self.queue.stop()
        logger.info("Ingest pipeline stopped")

    async def submit(self, source_file: str, mapping_format: Optional[str] = None) -> JobRecord:
        """Create a PENDING job for an uploaded file and queue it."""
        job = JobRecord(
            source_file=source_file,
            mapping_format=mapping_format or self.default_mapping_format,
        )
        await self.job_store.create(job)
        await self.queue.enqueue(job.id)
        logger.info(f"Job {job.id} submitted for {source_file}")
        return job


def build_stores(settings: Settings) -> Tuple[JobStore, ResultStore]:
    backend = settings.job_store_backend.lower()
    if backend == "memory":
        return InMemoryJobStore(), InMemoryResultStore()
    if backend == "supabase":
        from bulk_ingest.db.supabase_stores import (
            SupabaseJobStore,
            SupabaseResultStore,
            get_supabase,
        )

        client = get_supabase(settings.supabase_url, settings.supabase_service_role_key)
        return (
            SupabaseJobStore(client, settings.jobs_table),
            SupabaseResultStore(client, settings.processed_data_table),
        )
    raise ValueError(f"Unknown job store backend '{settings.job_store_backend}'")


def build_pipeline(settings: Settings) -> IngestPipeline:
    job_store, result_store = build_stores(settings)
    return IngestPipeline(
        job_store,
        result_store,
        LocalFileSource(settings.upload_dir),
        chunk_size=settings.chunk_size,
        recovery_interval_seconds=settings.recovery_interval_seconds,
        default_mapping_format=settings.default_mapping_format,
    )
