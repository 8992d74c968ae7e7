"""
Ingestion service.

Entry point for the idempotent batch ingestion protocol:

    DuplicateDetector -> TransactionalIngestionWriter -> ConflictResolver
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from methane_tracker.pydantic_models.ingestion import IngestReadingsRequest, IngestionResultPydModel
from methane_tracker.services.ingestion.conflict_resolver import ConflictResolver
from methane_tracker.services.ingestion.duplicate_detector import DuplicateDetector
from methane_tracker.services.ingestion.writer import TransactionalIngestionWriter
from methane_tracker.utils.constants import DEFAULT_LOCK_TIMEOUT_MS
from methane_tracker.utils.decimals import exact_sum

logger = logging.getLogger(__name__)


class IngestionService:
    """
    Ingests batches of readings exactly once per batch_key.

    Each call is an independent unit of work on its own session; calls for
    the same site serialize on the site row lock, calls for different sites
    do not contend. The service never retries by itself.
    """

    def __init__(self, session: AsyncSession, lock_timeout_ms: int = DEFAULT_LOCK_TIMEOUT_MS):
        self.session = session
        self.duplicate_detector = DuplicateDetector(session)
        self.writer = TransactionalIngestionWriter(session, lock_timeout_ms=lock_timeout_ms)
        self.conflict_resolver = ConflictResolver()

    async def ingest(self, request: IngestReadingsRequest) -> IngestionResultPydModel:
        """
        Ingest a validated batch.

        Returns:
            The batch outcome; ``duplicate`` is True when the batch_key had
            already been processed (sequential retry or concurrent race).

        Raises:
            SiteNotFoundError: the site does not exist; nothing was written
            IngestionRetryableError: transient store failure; nothing was written
        """
        batch_total = exact_sum(reading.value for reading in request.readings)
        logger.debug(
            f"Ingesting batch {request.batch_key} for site {request.site_id}: "
            f"{len(request.readings)} readings, total {batch_total}"
        )

        try:
            existing = await self.duplicate_detector.find_processed_batch(request.batch_key)
            if existing is not None:
                return existing

            # End the lookup's implicit read transaction; the writer opens its own
            await self.session.commit()

            return await self.writer.write(request, batch_total)
        except (SQLAlchemyError, ConnectionError, TimeoutError) as exc:
            return self.conflict_resolver.resolve(exc, request, batch_total)
