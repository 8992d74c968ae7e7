"""
Application constants.
"""
from enum import Enum


class ConfigFile:
    """Configuration file paths."""
    PRODUCTION = "production.toml"
    DEVELOPMENT = "development.toml"
    TEST = "test.toml"


class ComplianceStatus(str, Enum):
    """Site compliance against its regulatory emission limit."""
    WITHIN_LIMIT = "Within Limit"
    LIMIT_EXCEEDED = "Limit Exceeded"


# Batch size limits enforced at the API boundary
MIN_READINGS_PER_BATCH = 1
MAX_READINGS_PER_BATCH = 100

# NUMERIC(14, 4) for readings and limits
EMISSION_PRECISION = 14
EMISSION_SCALE = 4

# NUMERIC(20, 4) for batch totals and running totals
EMISSION_TOTAL_PRECISION = 20

# Bounded wait on a site's row lock, milliseconds
DEFAULT_LOCK_TIMEOUT_MS = 5000

# Constraint names the conflict resolver treats as idempotency violations
MEASUREMENT_IDEMPOTENCY_CONSTRAINT = "uq_measurements_idempotency_key"
INGESTION_LOG_BATCH_KEY_CONSTRAINT = "uq_ingestion_logs_batch_key"

# PostgreSQL SQLSTATE codes
PG_UNIQUE_VIOLATION = "23505"
PG_LOCK_NOT_AVAILABLE = "55P03"
PG_QUERY_CANCELED = "57014"
PG_SERIALIZATION_FAILURE = "40001"
PG_DEADLOCK_DETECTED = "40P01"
PG_DUPLICATE_DATABASE = "42P04"
