"""Periodic recovery of jobs left PENDING or PROCESSING in the job store.

Runs once when started and then every interval. PENDING jobs are queued;
PROCESSING jobs are assumed abandoned by a crashed worker and are reset to
PENDING before being queued. Jobs the dispatcher is tracking in this process
(queued or in flight) are left alone, so a slow job is never reset under a
live worker.
"""

import asyncio
import logging
from typing import Optional, Tuple

from bulk_ingest.db.stores import JobStore
from bulk_ingest.jobs.dispatcher import JobDispatcher
from bulk_ingest.jobs.models import JobStatus

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0


class RecoverySweep:

    def __init__(
        self,
        job_store: JobStore,
        dispatcher: JobDispatcher,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"Interval must be positive, got {interval_seconds}")
        self._jobs = job_store
        self._dispatcher = dispatcher
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    async def run_once(self) -> Tuple[int, int]:
        """Queue pending jobs and reset abandoned ones.

        Returns (pending jobs queued, processing jobs reset).
        """
        queued = 0
        for job in await self._jobs.find(status=JobStatus.PENDING):
            if await self._dispatcher.enqueue(job.id):
                queued += 1

        reset = 0
        for stale in await self._jobs.find(status=JobStatus.PROCESSING):
            # The listing may be out of date once the query returns.
            job = await self._jobs.find_by_id(stale.id)
            if job is None or job.status != JobStatus.PROCESSING:
                continue
            if self._dispatcher.is_tracked(job.id):
                continue
            logger.warning(f"Job {job.id} was left processing, re-queueing it")
            job.status = JobStatus.PENDING
            await self._jobs.save(job)
            await self._dispatcher.enqueue(job.id)
            reset += 1

        if queued or reset:
            logger.info(f"Recovery sweep queued {queued} pending job(s), reset {reset}")
        return queued, reset

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Error in recovery sweep")
            await asyncio.sleep(self._interval)
