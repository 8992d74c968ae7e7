"""
IngestionLog SQLAlchemy model.

The batch ledger: one row per successfully processed batch.
"""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from methane_tracker.database import Base
from methane_tracker.utils.constants import (
    EMISSION_SCALE,
    EMISSION_TOTAL_PRECISION,
    INGESTION_LOG_BATCH_KEY_CONSTRAINT,
)
from methane_tracker.utils.timestamps import utc_now


class IngestionLogDBModel(Base):
    """
    Processed batch record.

    Written in the same transaction as the batch's measurements and the
    site total increment. A retry with the same ``batch_key`` is answered
    from this row without touching the site.
    """

    __tablename__ = "ingestion_logs"

    __table_args__ = (
        UniqueConstraint("batch_key", name=INGESTION_LOG_BATCH_KEY_CONSTRAINT),
        {"comment": "Ledger of processed ingestion batches"},
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    batch_key = Column(
        String(255),
        nullable=False,
        comment="Client supplied batch identifier",
    )

    site_id = Column(
        UUID(as_uuid=True),
        ForeignKey("sites.id"),
        nullable=False,
        index=True,
    )

    readings_count = Column(Integer, nullable=False)

    total_value = Column(
        Numeric(EMISSION_TOTAL_PRECISION, EMISSION_SCALE),
        nullable=False,
        comment="Sum of the batch's reading values (kg)",
    )

    processed_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    def __repr__(self):
        return (
            f"<IngestionLogDBModel: {self.batch_key} readings={self.readings_count} "
            f"total={self.total_value}>"
        )
