"""In-process job queue using asyncio.

Jobs are processed strictly one at a time, in the order they were queued,
by a single consumer task. That task is the only place where a job id is
taken off the queue, so at most one job is ever active.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

from bulk_ingest.db.stores import JobStore
from bulk_ingest.jobs.dispatcher import JobDispatcher
from bulk_ingest.jobs.models import JobStatus

logger = logging.getLogger(__name__)


class InProcessQueue(JobDispatcher):
    """Local async job queue. Processes jobs one at a time via asyncio."""

    def __init__(
        self,
        process_fn: Callable[[str], Awaitable[Any]],
        job_store: JobStore,
    ):
        """
        process_fn: coroutine function(job_id)
            Runs a job to completion. Exceptions are logged and recorded on
            the job; they never stop the worker.
        """
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._queued: Set[str] = set()
        self._active_job_id: Optional[str] = None
        self._process_fn = process_fn
        self._jobs = job_store
        self._task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def busy(self) -> bool:
        return self._active_job_id is not None

    @property
    def active_job_id(self) -> Optional[str]:
        return self._active_job_id

    @property
    def size(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._running

    def is_tracked(self, job_id: str) -> bool:
        return job_id in self._queued or job_id == self._active_job_id

    async def enqueue(self, job_id: str) -> bool:
        if self.is_tracked(job_id):
            logger.debug(f"Job {job_id} already queued, not adding it again")
            return False
        self._queued.add(job_id)
        self._queue.put_nowait(job_id)
        return True

    async def join(self) -> None:
        """Wait until every queued job has been handled."""
        await self._queue.join()

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._worker_loop())

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _worker_loop(self) -> None:
        """Process jobs one at a time from the queue."""
        while self._running:
            # stop() cancels the task while it waits here
            job_id = await self._queue.get()
            self._queued.discard(job_id)
            self._active_job_id = job_id
            try:
                await self._run_job(job_id)
            finally:
                self._active_job_id = None
                self._queue.task_done()

    async def _run_job(self, job_id: str) -> None:
        try:
            job = await self._jobs.find_by_id(job_id)
        except Exception:
            logger.exception(f"Could not load job {job_id}")
            return

        if job is None:
            logger.warning(f"Skipping unknown job {job_id}")
            return
        if job.status == JobStatus.DONE:
            logger.info(f"Skipping job {job_id}: already done")
            return

        try:
            await self._process_fn(job_id)
        except Exception as e:
            logger.exception(f"Error processing job {job_id}")
            await self._record_failure(job_id, e)

    async def _record_failure(self, job_id: str, exc: Exception) -> None:
        """Make sure a failed job does not stay PENDING/PROCESSING."""
        try:
            job = await self._jobs.find_by_id(job_id)
            if job is None or job.status == JobStatus.DONE:
                return
            job.add_failure(exc)
            await self._jobs.save(job)
        except Exception:
            logger.exception(f"Error updating status of job {job_id}")
