"""
Tests for the idempotent batch ingestion write path.
"""
import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from methane_tracker.database.repositories import (
    IngestionLogRepository,
    MeasurementRepository,
    SiteRepository,
)
from methane_tracker.database.schemas import MeasurementDBModel
from methane_tracker.database.session_manager.db_session import Database
from methane_tracker.pydantic_models.ingestion import IngestReadingsRequest, ReadingIn
from methane_tracker.services.ingestion import (
    DuplicateDetector,
    IngestionRetryableError,
    IngestionService,
    SiteNotFoundError,
)
from methane_tracker.test.factory.measurement import IngestionLogFactory, MeasurementFactory
from methane_tracker.test.factory.site import SiteFactory
from methane_tracker.utils.constants import DEFAULT_LOCK_TIMEOUT_MS

BASE_TIME = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


def make_request(site_id, batch_key=None, values=("100", "200"), timestamps=None):
    timestamps = timestamps or [BASE_TIME + timedelta(minutes=i) for i in range(len(values))]
    return IngestReadingsRequest(
        site_id=site_id,
        batch_key=batch_key or str(uuid.uuid4()),
        readings=[
            ReadingIn(value=Decimal(value), recorded_at=recorded_at)
            for value, recorded_at in zip(values, timestamps)
        ],
    )


async def ingest_in_own_session(request, lock_timeout_ms=DEFAULT_LOCK_TIMEOUT_MS):
    """One independent unit of work, the way each API request runs."""
    async with Database() as session:
        service = IngestionService(session, lock_timeout_ms=lock_timeout_ms)
        return await service.ingest(request)


async def get_site_total(site_id) -> Decimal:
    async with Database() as session:
        site = await SiteRepository(session).get_by_id(site_id)
        return site.total_emissions_to_date


async def scan_site_total(site_id) -> Decimal:
    async with Database() as session:
        result = await session.execute(
            select(func.coalesce(func.sum(MeasurementDBModel.value), 0)).where(
                MeasurementDBModel.site_id == site_id
            )
        )
        return Decimal(result.scalar_one())


async def count_site_readings(site_id) -> int:
    async with Database() as session:
        return await MeasurementRepository(session).count({"site_id": site_id})


async def get_batch_readings(batch_key, readings_count) -> list[MeasurementDBModel]:
    """Stored readings of one batch, looked up by their exact keys in input order."""
    keys = [f"{batch_key}:{index}" for index in range(readings_count)]
    async with Database() as session:
        result = await session.execute(
            select(MeasurementDBModel).where(MeasurementDBModel.idempotency_key.in_(keys))
        )
        rows = {row.idempotency_key: row for row in result.scalars().all()}
    return [rows[key] for key in keys if key in rows]


@pytest.mark.asyncio
async def test_new_batch_then_retry_is_reported_as_duplicate():
    """Limit 5000, total 0; B1 = [100, 200] -> 300, and the retry changes nothing."""
    site = await SiteFactory(emission_limit=Decimal("5000"))
    request = make_request(site.id, batch_key="B1", values=("100", "200"))

    first = await ingest_in_own_session(request)
    assert first.batch_key == "B1"
    assert first.readings_processed == 2
    assert first.total_value == Decimal("300")
    assert first.duplicate is False
    assert await get_site_total(site.id) == Decimal("300")

    second = await ingest_in_own_session(request)
    assert second.readings_processed == 2
    assert second.total_value == first.total_value
    assert second.duplicate is True
    assert await get_site_total(site.id) == Decimal("300")
    assert await count_site_readings(site.id) == 2


@pytest.mark.asyncio
async def test_duplicate_returns_recorded_ledger_values():
    site = await SiteFactory()
    await IngestionLogFactory(
        site_id=site.id,
        batch_key="already-done",
        readings_count=7,
        total_value=Decimal("42.5000"),
    )

    result = await ingest_in_own_session(
        make_request(site.id, batch_key="already-done", values=("1",))
    )

    assert result.duplicate is True
    assert result.readings_processed == 7
    assert result.total_value == Decimal("42.5")
    assert await get_site_total(site.id) == Decimal("0")
    assert await count_site_readings(site.id) == 0


@pytest.mark.asyncio
async def test_unknown_site_raises_and_writes_nothing():
    missing_site_id = uuid.uuid4()

    with pytest.raises(SiteNotFoundError) as exc_info:
        await ingest_in_own_session(make_request(missing_site_id, batch_key="orphan"))

    assert exc_info.value.site_id == missing_site_id
    async with Database() as session:
        assert await IngestionLogRepository(session).get_by_batch_key("orphan") is None
        assert await MeasurementRepository(session).count() == 0


@pytest.mark.asyncio
async def test_running_total_equals_sum_of_all_readings():
    site = await SiteFactory()
    batches = [
        ("0.0001", "0.0002"),
        ("123.4567",),
        ("0", "0", "0"),
        ("9999.9999", "0.0001"),
        ("1.1", "2.2", "3.3"),
    ]

    expected = Decimal("0")
    for values in batches:
        await ingest_in_own_session(make_request(site.id, values=values))
        expected += sum(Decimal(v) for v in values)
        assert await get_site_total(site.id) == expected

    assert expected == Decimal("10130.0570")
    assert await scan_site_total(site.id) == expected


@pytest.mark.asyncio
async def test_zero_valued_batch_is_valid():
    site = await SiteFactory()

    result = await ingest_in_own_session(make_request(site.id, values=("0",)))

    assert result.duplicate is False
    assert result.total_value == Decimal("0")
    assert await count_site_readings(site.id) == 1
    assert await get_site_total(site.id) == Decimal("0")


@pytest.mark.asyncio
async def test_readings_keep_input_order_in_idempotency_keys():
    """Out-of-order and identical timestamps are stored as given."""
    site = await SiteFactory()
    timestamps = [BASE_TIME, BASE_TIME - timedelta(hours=3), BASE_TIME]
    request = make_request(
        site.id, batch_key="ordered", values=("5", "6", "7"), timestamps=timestamps
    )

    await ingest_in_own_session(request)

    rows = await get_batch_readings("ordered", 3)

    assert [row.idempotency_key for row in rows] == ["ordered:0", "ordered:1", "ordered:2"]
    assert [row.value for row in rows] == [Decimal("5"), Decimal("6"), Decimal("7")]
    assert [row.recorded_at for row in rows] == timestamps


@pytest.mark.asyncio
async def test_concurrent_duplicate_submissions_are_counted_once():
    site = await SiteFactory()
    request = make_request(site.id, batch_key="racing-batch", values=("100", "200"))
    callers = 6

    results = await asyncio.gather(
        *(ingest_in_own_session(request) for _ in range(callers))
    )

    assert sum(1 for result in results if not result.duplicate) == 1
    assert sum(1 for result in results if result.duplicate) == callers - 1
    assert all(result.total_value == Decimal("300") for result in results)
    assert all(result.readings_processed == 2 for result in results)
    assert await get_site_total(site.id) == Decimal("300")
    assert await count_site_readings(site.id) == 2


@pytest.mark.asyncio
async def test_concurrent_distinct_batches_on_one_site_lose_no_updates():
    site = await SiteFactory()
    requests = [
        make_request(site.id, values=(f"{i}.25", "1")) for i in range(10)
    ]

    results = await asyncio.gather(*(ingest_in_own_session(r) for r in requests))

    assert not any(result.duplicate for result in results)
    expected = sum(result.total_value for result in results)
    assert expected == Decimal("57.50")
    assert await get_site_total(site.id) == expected
    assert await scan_site_total(site.id) == expected


@pytest.mark.asyncio
async def test_batches_for_different_sites_are_independent():
    site_a = await SiteFactory()
    site_b = await SiteFactory()

    await asyncio.gather(
        ingest_in_own_session(make_request(site_a.id, values=("10",))),
        ingest_in_own_session(make_request(site_b.id, values=("20", "30"))),
    )

    assert await get_site_total(site_a.id) == Decimal("10")
    assert await get_site_total(site_b.id) == Decimal("50")


@pytest.mark.asyncio
async def test_failure_after_readings_insert_rolls_back_everything(monkeypatch):
    site = await SiteFactory()
    readings_seen_in_transaction = []

    async def crash_before_total_update(self, site_id, delta):
        readings_seen_in_transaction.append(
            await MeasurementRepository(self.session).count({"site_id": site_id})
        )
        raise RuntimeError("simulated crash mid-batch")

    monkeypatch.setattr(SiteRepository, "increment_total_emissions", crash_before_total_update)

    with pytest.raises(RuntimeError, match="simulated crash"):
        await ingest_in_own_session(make_request(site.id, batch_key="doomed"))

    assert readings_seen_in_transaction == [2]
    assert await count_site_readings(site.id) == 0
    assert await get_site_total(site.id) == Decimal("0")
    async with Database() as session:
        assert await IngestionLogRepository(session).get_by_batch_key("doomed") is None

    # The client retries with the same key once the fault is gone
    monkeypatch.undo()
    result = await ingest_in_own_session(make_request(site.id, batch_key="doomed"))
    assert result.duplicate is False
    assert await get_site_total(site.id) == Decimal("300")


@pytest.mark.asyncio
async def test_storage_rejects_reused_idempotency_key():
    site = await SiteFactory()
    await MeasurementFactory(site_id=site.id, idempotency_key="batch-x:0")

    with pytest.raises(IntegrityError):
        await MeasurementFactory(site_id=site.id, idempotency_key="batch-x:0")

    assert await count_site_readings(site.id) == 1


@pytest.mark.asyncio
async def test_reading_key_conflict_past_fast_path_is_a_duplicate():
    """The ledger misses but a reading of the batch is already stored."""
    site = await SiteFactory()
    await MeasurementFactory(site_id=site.id, idempotency_key="slipped:0", value=Decimal("100"))

    result = await ingest_in_own_session(make_request(site.id, batch_key="slipped"))

    assert result.duplicate is True
    assert result.readings_processed == 2
    assert result.total_value == Decimal("300")
    assert await get_site_total(site.id) == Decimal("0")
    assert await count_site_readings(site.id) == 1


@pytest.mark.asyncio
async def test_batch_key_conflict_past_fast_path_is_a_duplicate(monkeypatch):
    """The ledger row exists but the advisory lookup missed it."""
    site = await SiteFactory()
    await IngestionLogFactory(site_id=site.id, batch_key="ledger-only")

    async def miss(self, batch_key):
        return None

    monkeypatch.setattr(DuplicateDetector, "find_processed_batch", miss)

    result = await ingest_in_own_session(make_request(site.id, batch_key="ledger-only"))

    assert result.duplicate is True
    assert await get_site_total(site.id) == Decimal("0")
    assert await count_site_readings(site.id) == 0


@pytest.mark.asyncio
async def test_lock_wait_timeout_is_retryable_and_writes_nothing():
    site = await SiteFactory()
    request = make_request(site.id, batch_key="blocked")

    async with Database() as blocker:
        await SiteRepository(blocker).get_for_update(site.id)

        with pytest.raises(IngestionRetryableError):
            await ingest_in_own_session(request, lock_timeout_ms=200)

        await blocker.rollback()

    async with Database() as session:
        assert await IngestionLogRepository(session).get_by_batch_key("blocked") is None
    assert await count_site_readings(site.id) == 0

    result = await ingest_in_own_session(request)
    assert result.duplicate is False
    assert await get_site_total(site.id) == Decimal("300")



@pytest.mark.asyncio
async def test_batch_keys_sharing_a_prefix_keep_separate_readings():
    site = await SiteFactory()

    first = await ingest_in_own_session(make_request(site.id, batch_key="a", values=("1", "2")))
    second = await ingest_in_own_session(make_request(site.id, batch_key="a:1", values=("4",)))

    assert first.duplicate is False
    assert second.duplicate is False
    assert [row.idempotency_key for row in await get_batch_readings("a", 2)] == ["a:0", "a:1"]
    assert [row.idempotency_key for row in await get_batch_readings("a:1", 1)] == ["a:1:0"]
    assert await get_site_total(site.id) == Decimal("7")
