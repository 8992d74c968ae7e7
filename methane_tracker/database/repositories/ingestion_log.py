"""
IngestionLog Repository.

Lookup and insert primitives for the batch ledger.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from methane_tracker.database.repositories.base import BaseRepository
from methane_tracker.database.schemas.ingestion_log import IngestionLogDBModel


class IngestionLogRepository(BaseRepository[IngestionLogDBModel]):
    """Repository for batch ledger operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(IngestionLogDBModel, session)

    async def get_by_batch_key(self, batch_key: str) -> Optional[IngestionLogDBModel]:
        """Single lookup on the unique ``batch_key`` index; takes no locks."""
        stmt = select(IngestionLogDBModel).where(
            IngestionLogDBModel.batch_key == batch_key
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def record_batch(
        self,
        batch_key: str,
        site_id: UUID,
        readings_count: int,
        total_value: Decimal,
    ) -> IngestionLogDBModel:
        """Insert the ledger entry for a batch; raises on a reused batch_key."""
        return await self.create(
            batch_key=batch_key,
            site_id=site_id,
            readings_count=readings_count,
            total_value=total_value,
        )
