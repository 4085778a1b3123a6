"""Job dispatcher interface."""

from abc import ABC, abstractmethod


class JobDispatcher(ABC):
    """Abstract interface for handing job ids to a worker."""

    @abstractmethod
    async def enqueue(self, job_id: str) -> bool:
        """Queue a job id for processing. Returns immediately.

        Returns False when the id is already queued or being processed.
        """
        ...

    @abstractmethod
    def is_tracked(self, job_id: str) -> bool:
        """True while the job is queued or being processed in this process."""
        ...

    @abstractmethod
    async def start(self) -> None:
        """Start the dispatcher (e.g., start worker loop)."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the dispatcher gracefully."""
        ...
