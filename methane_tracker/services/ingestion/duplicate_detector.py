"""
Fast-path duplicate detection against the batch ledger.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from methane_tracker.database.repositories import IngestionLogRepository
from methane_tracker.pydantic_models.ingestion import IngestionResultPydModel

logger = logging.getLogger(__name__)


class DuplicateDetector:
    """
    Answers retries from the ledger without opening the write path.

    The lookup is advisory: two requests racing on the same batch_key can
    both miss here. The UNIQUE constraints behind the writer are what make
    the outcome correct; see ConflictResolver.
    """

    def __init__(self, session: AsyncSession):
        self.ingestion_log_repo = IngestionLogRepository(session)

    async def find_processed_batch(
        self, batch_key: str
    ) -> Optional[IngestionResultPydModel]:
        """
        Return the recorded outcome for ``batch_key`` tagged as a duplicate,
        or None when the batch has not been processed yet.
        """
        entry = await self.ingestion_log_repo.get_by_batch_key(batch_key)
        if entry is None:
            return None

        logger.info(f"Batch {batch_key} already processed at {entry.processed_at}")
        return IngestionResultPydModel(
            batch_key=entry.batch_key,
            readings_processed=entry.readings_count,
            total_value=entry.total_value,
            duplicate=True,
        )
