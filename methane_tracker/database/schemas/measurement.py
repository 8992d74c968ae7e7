"""
Measurement SQLAlchemy model.

One row per methane reading reported by a sensor.
"""

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID

from methane_tracker.database import Base
from methane_tracker.utils.constants import (
    EMISSION_PRECISION,
    EMISSION_SCALE,
    MEASUREMENT_IDEMPOTENCY_CONSTRAINT,
)
from methane_tracker.utils.timestamps import utc_now


class MeasurementDBModel(Base):
    """
    Individual methane reading.

    Rows are written only by the ingestion writer and never updated. The
    UNIQUE constraint on ``idempotency_key`` ("{batch_key}:{index}") is the
    storage-level guard against counting a reading twice.
    """

    __tablename__ = "measurements"

    __table_args__ = (
        Index("ix_measurements_site_recorded_at", "site_id", "recorded_at"),
        CheckConstraint("value >= 0", name="ck_measurements_value_non_negative"),
        UniqueConstraint("idempotency_key", name=MEASUREMENT_IDEMPOTENCY_CONSTRAINT),
        {"comment": "Individual methane readings"},
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    site_id = Column(
        UUID(as_uuid=True),
        ForeignKey("sites.id"),
        nullable=False,
        index=True,
    )

    value = Column(
        Numeric(EMISSION_PRECISION, EMISSION_SCALE),
        nullable=False,
        comment="Methane reading (kg)",
    )

    recorded_at = Column(
        DateTime(timezone=True),
        nullable=False,
        comment="Sensor-supplied timestamp; may arrive out of order",
    )

    idempotency_key = Column(
        String(255),
        nullable=False,
        comment="{batch_key}:{index}",
    )

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    def __repr__(self):
        return f"<MeasurementDBModel: {self.idempotency_key} value={self.value}>"

