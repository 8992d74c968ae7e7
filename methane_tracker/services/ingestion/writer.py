"""
Transactional ingestion writer.

Persists one batch atomically:

1. bound the lock wait (``SET LOCAL lock_timeout``)
2. ``SELECT ... FOR UPDATE`` the site row
3. bulk insert readings keyed ``{batch_key}:{index}``
4. ``total_emissions_to_date = total_emissions_to_date + batch_total``
5. insert the ledger entry

Everything happens inside ``session.begin()``: any exception rolls the
whole batch back and no partial write is ever visible.
"""
import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from methane_tracker.database.repositories import (
    IngestionLogRepository,
    MeasurementRepository,
    SiteRepository,
)
from methane_tracker.pydantic_models.ingestion import IngestReadingsRequest, IngestionResultPydModel
from methane_tracker.services.ingestion.exceptions import SiteNotFoundError
from methane_tracker.utils.constants import DEFAULT_LOCK_TIMEOUT_MS

logger = logging.getLogger(__name__)


def build_idempotency_key(batch_key: str, index: int) -> str:
    return f"{batch_key}:{index}"


def build_measurement_rows(request: IngestReadingsRequest) -> list[dict[str, Any]]:
    """One insert row per reading, in input order."""
    return [
        {
            "site_id": request.site_id,
            "value": reading.value,
            "recorded_at": reading.recorded_at,
            "idempotency_key": build_idempotency_key(request.batch_key, index),
        }
        for index, reading in enumerate(request.readings)
    ]


class TransactionalIngestionWriter:
    """Writes a validated batch under the site's row lock."""

    def __init__(self, session: AsyncSession, lock_timeout_ms: int = DEFAULT_LOCK_TIMEOUT_MS):
        self.session = session
        self.lock_timeout_ms = lock_timeout_ms
        self.site_repo = SiteRepository(session)
        self.measurement_repo = MeasurementRepository(session)
        self.ingestion_log_repo = IngestionLogRepository(session)

    async def write(
        self, request: IngestReadingsRequest, batch_total: Decimal
    ) -> IngestionResultPydModel:
        """
        Persist the batch and increment the site's running total.

        The session must not be inside a transaction when this is called.

        Raises:
            SiteNotFoundError: the site does not exist (rolled back)
            IntegrityError: a reading key or batch key already exists (rolled back)
        """
        async with self.session.begin():
            await self._bound_lock_wait()

            site = await self.site_repo.get_for_update(request.site_id)
            if site is None:
                raise SiteNotFoundError(request.site_id)

            await self.measurement_repo.bulk_insert(build_measurement_rows(request))
            await self.site_repo.increment_total_emissions(site.id, batch_total)
            await self.ingestion_log_repo.record_batch(
                batch_key=request.batch_key,
                site_id=site.id,
                readings_count=len(request.readings),
                total_value=batch_total,
            )

        logger.info(
            f"Committed batch {request.batch_key} for site {request.site_id}: "
            f"{len(request.readings)} readings, total {batch_total}"
        )
        return IngestionResultPydModel(
            batch_key=request.batch_key,
            readings_processed=len(request.readings),
            total_value=batch_total,
            duplicate=False,
        )

    async def _bound_lock_wait(self):
        # SET LOCAL takes no bind parameters; the value is a plain int
        await self.session.execute(
            text(f"SET LOCAL lock_timeout = {int(self.lock_timeout_ms)}")
        )
