"""
Database seeding service for demo sites and readings.

Usage:
    from methane_tracker.services.seed_database import DatabaseSeeder

    async with DatabaseSeeder() as seeder:
        await seeder.seed_all(clear_existing=True)
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from methane_tracker.database.repositories import (
    IngestionLogRepository,
    MeasurementRepository,
    SiteRepository,
)
from methane_tracker.database.session_manager.db_session import Database
from methane_tracker.pydantic_models.ingestion import IngestReadingsRequest, ReadingIn
from methane_tracker.services.ingestion import IngestionService

logger = logging.getLogger(__name__)

DEMO_SITES = [
    {"name": "Well Pad Alpha", "location": "Alberta, Canada", "emission_limit": Decimal("5000.0000")},
    {"name": "Processing Plant Beta", "location": "Texas, USA", "emission_limit": Decimal("12000.0000")},
    {"name": "Compressor Station Gamma", "location": "North Sea, UK", "emission_limit": Decimal("3000.0000")},
]

# Namespace for deterministic demo batch keys: re-running the seed re-sends
# the same batches and they are reported as duplicates.
DEMO_BATCH_NAMESPACE = uuid.UUID("8f0a6c1e-4b57-4f3e-9d1a-2c7e5b9f3a10")

DEMO_READINGS_PER_BATCH = 24


class DatabaseSeeder:
    """Service for seeding the database with demo sites and readings."""

    def __init__(self, session: AsyncSession | None = None):
        """
        Args:
            session: Optional async database session. If not provided, one is
                created when entering the context manager.
        """
        self._session = session
        self._external_session = session is not None

    async def __aenter__(self):
        if not self._external_session:
            self._db_context = Database()
            self._session = await self._db_context.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self._external_session and hasattr(self, "_db_context"):
            await self._db_context.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def session(self) -> AsyncSession:
        if not self._session:
            raise RuntimeError("Session not initialized. Use as context manager.")
        return self._session

    async def seed_all(
        self,
        clear_existing: bool = False,
        skip_readings: bool = False,
    ) -> dict[str, Any]:
        """
        Seed demo sites and, unless skipped, one batch of hourly readings per site.

        Returns:
            Dictionary with seeding statistics
        """
        logger.info("Starting database seeding")

        stats = {
            "sites": 0,
            "batches_ingested": 0,
            "batches_duplicate": 0,
            "readings": 0,
            "errors": [],
        }

        try:
            if clear_existing:
                await self._clear_existing_data()

            sites = await self.seed_sites()
            stats["sites"] = len(sites)
            await self.session.commit()

            if not skip_readings:
                service = IngestionService(self.session)
                # Plain values: a rollback expires the loaded site rows
                targets = [(site.id, site.name) for site in sites]
                for site_id, site_name in targets:
                    try:
                        result = await service.ingest(self._demo_batch(site_id))
                    except Exception as e:
                        logger.warning(f"Failed to ingest demo batch for {site_name}: {e}")
                        stats["errors"].append(f"{site_name}: {e}")
                        await self.session.rollback()
                        continue

                    if result.duplicate:
                        stats["batches_duplicate"] += 1
                    else:
                        stats["batches_ingested"] += 1
                        stats["readings"] += result.readings_processed

            logger.info(f"Database seeding completed: {stats}")
            return stats

        except Exception as e:
            logger.error(f"Error during database seeding: {e}", exc_info=True)
            await self.session.rollback()
            raise

    async def _clear_existing_data(self):
        """Delete ledger, readings and sites, in foreign key order."""
        logger.info("Clearing existing data")

        await IngestionLogRepository(self.session).delete_all()
        await MeasurementRepository(self.session).delete_all()
        await SiteRepository(self.session).delete_all()

        await self.session.commit()
        logger.info("Existing data cleared")

    async def seed_sites(self) -> list:
        """
        Create the demo sites that do not exist yet (matched by name).

        Returns:
            All demo site rows
        """
        repo = SiteRepository(self.session)
        sites = []
        for site_data in DEMO_SITES:
            existing = await repo.get_all(limit=1, filters={"name": site_data["name"]})
            if existing:
                sites.append(existing[0])
                continue

            site = await repo.create(**site_data, total_emissions_to_date=Decimal("0"))
            logger.info(f"Created site {site.name} (limit: {site.emission_limit} kg)")
            sites.append(site)

        return sites

    @staticmethod
    def _demo_batch(site_id: uuid.UUID) -> IngestReadingsRequest:
        """24 hourly readings ending at midnight UTC today, keyed by site."""
        end = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        readings = [
            ReadingIn(
                value=Decimal("10.5") + Decimal(hour) * Decimal("0.25"),
                recorded_at=end - timedelta(hours=DEMO_READINGS_PER_BATCH - hour),
            )
            for hour in range(DEMO_READINGS_PER_BATCH)
        ]
        return IngestReadingsRequest(
            site_id=site_id,
            batch_key=str(uuid.uuid5(DEMO_BATCH_NAMESPACE, f"{site_id}:{end.date()}")),
            readings=readings,
        )
