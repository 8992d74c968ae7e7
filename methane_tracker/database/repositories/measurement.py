"""
Measurement Repository.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from methane_tracker.database.repositories.base import BaseRepository
from methane_tracker.database.schemas.measurement import MeasurementDBModel


class MeasurementRepository(BaseRepository[MeasurementDBModel]):
    """Repository for measurement operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(MeasurementDBModel, session)

    async def bulk_insert(self, rows: list[dict[str, Any]]) -> None:
        """
        Insert all rows as one bulk executemany.

        A UNIQUE violation on any row (e.g. a reused idempotency key) raises
        IntegrityError; the caller's transaction rollback discards the rest.
        """
        if not rows:
            return
        await self.session.execute(insert(MeasurementDBModel), rows)

    async def get_site_stats(self, site_id: UUID) -> tuple[int, Optional[datetime]]:
        """
        Reading count and latest ``recorded_at`` for a site.

        Read-side reporting only; the running total is never derived here.
        """
        stmt = select(
            func.count(MeasurementDBModel.id),
            func.max(MeasurementDBModel.recorded_at),
        ).where(MeasurementDBModel.site_id == site_id)
        result = await self.session.execute(stmt)
        count, last_reading_at = result.one()
        return count, last_reading_at

    async def get_by_site(
        self, site_id: UUID, skip: int = 0, limit: int = 100
    ) -> list[MeasurementDBModel]:
        """Readings for a site, newest sensor timestamp first."""
        stmt = (
            select(MeasurementDBModel)
            .where(MeasurementDBModel.site_id == site_id)
            .order_by(MeasurementDBModel.recorded_at.desc(), MeasurementDBModel.idempotency_key)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

