"""
Site SQLAlchemy model.

An industrial site (well pad, processing plant, compressor station) under
methane emissions monitoring.
"""

import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String
from sqlalchemy.dialects.postgresql import UUID

from methane_tracker.database import Base
from methane_tracker.utils.constants import (
    EMISSION_PRECISION,
    EMISSION_SCALE,
    EMISSION_TOTAL_PRECISION,
)
from methane_tracker.utils.timestamps import utc_now


class SiteDBModel(Base):
    """
    Monitored site with its pre-computed running emissions total.

    ``total_emissions_to_date`` always equals the sum of every ingested
    measurement value for the site. It is only ever incremented inside the
    ingestion transaction while the row is locked, so compliance checks
    never have to SUM() the measurements table.
    """

    __tablename__ = "sites"

    __table_args__ = (
        CheckConstraint("emission_limit > 0", name="ck_sites_emission_limit_positive"),
        CheckConstraint(
            "total_emissions_to_date >= 0", name="ck_sites_total_emissions_non_negative"
        ),
        {"comment": "Monitored sites with running emission totals"},
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name = Column(String(255), nullable=False, comment="Human readable site name")

    location = Column(String(255), nullable=False, comment="Free-form location description")

    latitude = Column(Numeric(9, 6), nullable=True)
    longitude = Column(Numeric(9, 6), nullable=True)

    # NUMERIC, never float
    emission_limit = Column(
        Numeric(EMISSION_PRECISION, EMISSION_SCALE),
        nullable=False,
        comment="Maximum allowed emissions (kg) set by the regulator",
    )

    total_emissions_to_date = Column(
        Numeric(EMISSION_TOTAL_PRECISION, EMISSION_SCALE),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
        comment="Running total of all ingested readings (kg)",
    )

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self):
        return (
            f"<SiteDBModel: {self.name} total={self.total_emissions_to_date} "
            f"limit={self.emission_limit}>"
        )
