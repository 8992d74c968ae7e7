"""
Conflict resolution for the ingestion write path.

Two requests with the same batch_key can both pass the ledger lookup. Only
one of them can commit: the loser hits the UNIQUE constraint on
``measurements.idempotency_key`` (or ``ingestion_logs.batch_key``) and is
answered as a duplicate. Other store failures are classified as retryable or
left to propagate.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from methane_tracker.pydantic_models.ingestion import IngestReadingsRequest, IngestionResultPydModel
from methane_tracker.services.ingestion.exceptions import IngestionRetryableError
from methane_tracker.utils.constants import (
    INGESTION_LOG_BATCH_KEY_CONSTRAINT,
    MEASUREMENT_IDEMPOTENCY_CONSTRAINT,
    PG_DEADLOCK_DETECTED,
    PG_LOCK_NOT_AVAILABLE,
    PG_QUERY_CANCELED,
    PG_SERIALIZATION_FAILURE,
    PG_UNIQUE_VIOLATION,
)

logger = logging.getLogger(__name__)

IDEMPOTENCY_CONSTRAINTS = frozenset(
    {MEASUREMENT_IDEMPOTENCY_CONSTRAINT, INGESTION_LOG_BATCH_KEY_CONSTRAINT}
)

RETRYABLE_PG_CODES = frozenset(
    {
        PG_LOCK_NOT_AVAILABLE,
        PG_QUERY_CANCELED,
        PG_SERIALIZATION_FAILURE,
        PG_DEADLOCK_DETECTED,
    }
)


def _driver_errors(exc: BaseException) -> list:
    """The DBAPI error and, for asyncpg, the native exception it wraps."""
    orig = getattr(exc, "orig", None)
    if orig is None:
        return []
    return [orig, getattr(orig, "__cause__", None)]


def get_pg_code(exc: BaseException) -> Optional[str]:
    for error in _driver_errors(exc):
        code = getattr(error, "pgcode", None) or getattr(error, "sqlstate", None)
        if code:
            return code
    return None


def get_constraint_name(exc: BaseException) -> Optional[str]:
    for error in _driver_errors(exc):
        name = getattr(error, "constraint_name", None)
        if name:
            return name
    return None


def is_idempotency_conflict(exc: BaseException) -> bool:
    """True only for a unique violation on a reading key or batch key."""
    if not isinstance(exc, IntegrityError):
        return False

    pg_code = get_pg_code(exc)
    if pg_code is not None and pg_code != PG_UNIQUE_VIOLATION:
        return False

    constraint_name = get_constraint_name(exc)
    if constraint_name is not None:
        return constraint_name in IDEMPOTENCY_CONSTRAINTS

    # driver did not expose the constraint; fall back to the error text
    message = str(exc.orig)
    return any(name in message for name in IDEMPOTENCY_CONSTRAINTS)


def is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, PoolTimeoutError):
        return True
    if isinstance(exc, DBAPIError):
        return exc.connection_invalidated or get_pg_code(exc) in RETRYABLE_PG_CODES
    return isinstance(exc, (ConnectionError, TimeoutError))


class ConflictResolver:
    """Maps write path failures onto the ingestion outcome."""

    def resolve(
        self, exc: Exception, request: IngestReadingsRequest, batch_total: Decimal
    ) -> IngestionResultPydModel:
        """
        Turn an idempotency conflict into a duplicate result.

        The result reports this request's own readings and total, which match
        the committed batch whenever retries carry the same payload.

        Raises:
            IngestionRetryableError: for transient store failures
            Exception: ``exc`` itself for anything else
        """
        if is_idempotency_conflict(exc):
            logger.info(
                f"Batch {request.batch_key} committed by a concurrent request; "
                "reporting as duplicate"
            )
            return IngestionResultPydModel(
                batch_key=request.batch_key,
                readings_processed=len(request.readings),
                total_value=batch_total,
                duplicate=True,
            )

        if is_retryable(exc):
            logger.warning(f"Retryable failure ingesting batch {request.batch_key}: {exc}")
            raise IngestionRetryableError(
                f"Batch {request.batch_key} was not committed due to a transient "
                "database error; retry with the same batch_key",
                original_exception=exc,
            ) from exc

        raise exc
