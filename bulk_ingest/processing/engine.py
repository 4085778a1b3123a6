"""Row processing engine: turns an uploaded table into records and row errors.

A job is processed in chunks of rows. After every chunk the cumulative
progress is persisted, so clients polling the job store see it advance.
Row-level problems are collected as errors and never abort the job; anything
else forces the job to DONE with a single row-0 error and is re-raised.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from bulk_ingest.db.stores import JobStore, ResultStore
from bulk_ingest.jobs.errors import JobNotFound
from bulk_ingest.jobs.models import JobRecord, JobStatus, RowError
from bulk_ingest.mapping.base import MappingStrategy
from bulk_ingest.mapping.registry import MappingRegistry, registry as default_registry
from bulk_ingest.processing.chunking import data_rows, iter_chunks
from bulk_ingest.storage.uploads import FileSource

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000

VALIDATION_FAILED = "Validation failed"
MAPPING_FAILED = "Failed to map data"


def process_row(
    strategy: MappingStrategy,
    row_number: int,
    row: Sequence[Any],
    records: List[Dict[str, Any]],
    errors: List[RowError],
) -> None:
    """Validate and map one row, appending to records or errors."""
    validation = strategy.validate(row)
    if not validation.valid:
        for error in validation.errors:
            errors.append(RowError(row=row_number, col=error.col, message=VALIDATION_FAILED))
        return

    try:
        records.append(strategy.map(row))
    except Exception as e:
        logger.debug(f"Row {row_number} could not be mapped: {e}")
        errors.append(RowError(row=row_number, col=0, message=MAPPING_FAILED))


class RowProcessingEngine:

    def __init__(
        self,
        job_store: JobStore,
        result_store: ResultStore,
        file_source: FileSource,
        mapping_registry: Optional[MappingRegistry] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        self._jobs = job_store
        self._results = result_store
        self._source = file_source
        self._registry = mapping_registry or default_registry
        self._chunk_size = chunk_size

    async def process(self, job_id: str) -> JobRecord:
        """Run a job to completion. Always leaves it DONE unless it is missing."""
        job = await self._jobs.find_by_id(job_id)
        if job is None:
            raise JobNotFound(job_id)

        logger.info(f"Processing job {job_id} ({job.source_file}, format={job.mapping_format})")

        try:
            await self._run(job)
        except Exception as e:
            logger.error(f"Processing job {job_id} failed: {e}")
            job.add_failure(e)
            try:
                await self._jobs.save(job)
            except Exception:
                logger.exception(f"Could not record failure of job {job_id}")
            raise

        try:
            self._source.delete(job.source_file)
        except OSError as e:
            logger.warning(f"Could not delete source file of job {job_id}: {e}")

        logger.info(
            f"Job {job_id} done: {job.total_rows} rows, {len(job.errors)} errors"
        )
        return job

    async def _run(self, job: JobRecord) -> None:
        job.status = JobStatus.PROCESSING
        await self._jobs.save(job)

        loop = asyncio.get_running_loop()
        table = await loop.run_in_executor(None, self._source.load, job.source_file)

        rows = data_rows(table)
        job.total_rows = len(rows)
        job.processed_rows = 0
        await self._jobs.save(job)

        strategy = self._registry.resolve(job.mapping_format)
        records: List[Dict[str, Any]] = []
        errors: List[RowError] = []

        for chunk in iter_chunks(rows, self._chunk_size):
            for row_number, row in chunk:
                process_row(strategy, row_number, row, records, errors)
            job.processed_rows += len(chunk)
            await self._jobs.save(job)
            # Let other coroutines (HTTP handlers, the sweep) run between chunks
            await asyncio.sleep(0)

        await self._results.create(job.id, records)

        job.errors.extend(errors)
        job.status = JobStatus.DONE
        await self._jobs.save(job)
