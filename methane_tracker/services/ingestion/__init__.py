from methane_tracker.services.ingestion.conflict_resolver import ConflictResolver
from methane_tracker.services.ingestion.duplicate_detector import DuplicateDetector
from methane_tracker.services.ingestion.exceptions import (
    IngestionError,
    IngestionRetryableError,
    SiteNotFoundError,
)
from methane_tracker.services.ingestion.service import IngestionService
from methane_tracker.services.ingestion.writer import TransactionalIngestionWriter

__all__ = [
    "ConflictResolver",
    "DuplicateDetector",
    "IngestionError",
    "IngestionRetryableError",
    "IngestionService",
    "SiteNotFoundError",
    "TransactionalIngestionWriter",
]
