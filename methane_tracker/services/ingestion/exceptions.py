"""
Ingestion exceptions.
"""
from uuid import UUID


class IngestionError(Exception):
    """Base class for errors surfaced by the ingestion write path."""


class SiteNotFoundError(IngestionError):
    """
    The target site does not exist.

    Raised under the site row lock, so the ingestion transaction has already
    been rolled back when callers see it. Not retryable as-is.
    """

    def __init__(self, site_id: UUID):
        self.site_id = site_id
        super().__init__(f"Site {site_id} not found")


class IngestionRetryableError(IngestionError):
    """
    A transient store failure (lock timeout, lost connection, deadlock).

    Nothing from the batch was committed; the client should retry with the
    same batch_key.
    """

    def __init__(self, message: str, original_exception: Exception | None = None):
        self.original_exception = original_exception
        super().__init__(message)
