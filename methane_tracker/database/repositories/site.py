"""
Site Repository.

Holds the aggregate-row primitives used by the ingestion writer: lock a site
row for the duration of a transaction and increment its running total in
the store.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from methane_tracker.database.repositories.base import BaseRepository
from methane_tracker.database.schemas.site import SiteDBModel
from methane_tracker.utils.timestamps import utc_now


class SiteRepository(BaseRepository[SiteDBModel]):
    """Repository for site operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(SiteDBModel, session)

    async def get_for_update(self, site_id: UUID) -> Optional[SiteDBModel]:
        """
        Lock and return the site row, or None if it does not exist.

        Issues ``SELECT ... FOR UPDATE``; the row lock is held until the
        enclosing transaction commits or rolls back. Concurrent callers for
        the same site block here.
        """
        stmt = (
            select(SiteDBModel)
            .where(SiteDBModel.id == site_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_total_emissions(self, site_id: UUID, delta: Decimal) -> int:
        """
        Add ``delta`` to the site's running total inside the database.

        The new value is computed by PostgreSQL from the current column value
        (``SET total = total + :delta``), never from a value read into Python.

        Returns:
            Number of rows updated (1 when the site exists)
        """
        stmt = (
            update(SiteDBModel)
            .where(SiteDBModel.id == site_id)
            .values(
                total_emissions_to_date=SiteDBModel.total_emissions_to_date + delta,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def list_sites(self, skip: int = 0, limit: int = 100) -> list[SiteDBModel]:
        stmt = (
            select(SiteDBModel)
            .order_by(SiteDBModel.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
