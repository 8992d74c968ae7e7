"""
Timestamp helpers.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current time; every DateTime column is timestamptz."""
    return datetime.now(timezone.utc)
