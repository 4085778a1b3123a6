"""Exceptions raised by the ingestion pipeline."""


class IngestError(Exception):
    """Base class for pipeline errors."""


class JobNotFound(IngestError):
    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class SourceUnavailable(IngestError):
    """The raw table referenced by a job cannot be read."""

    def __init__(self, reference: str, reason: str = ""):
        message = f"Source file unavailable: {reference}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.reference = reference
        self.reason = reason


class MappingFailure(IngestError):
    """A validated row could not be transformed into a record."""
