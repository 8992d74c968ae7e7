"""
Pydantic models for Sites.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from methane_tracker.services.compliance import get_compliance_status
from methane_tracker.utils.constants import (
    EMISSION_PRECISION,
    EMISSION_SCALE,
    ComplianceStatus,
)


class SiteCreate(BaseModel):
    """Model for registering a site."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Well Pad Alpha"])
    location: str = Field(..., min_length=1, max_length=255, examples=["Alberta, Canada"])
    emission_limit: Decimal = Field(
        ...,
        gt=0,
        max_digits=EMISSION_PRECISION,
        decimal_places=EMISSION_SCALE,
        description="Regulatory emission limit in kg",
        examples=[Decimal("5000")],
    )
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90, decimal_places=6)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180, decimal_places=6)


class SitePydModel(BaseModel):
    """Model for site response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    location: str
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    emission_limit: Decimal
    total_emissions_to_date: Decimal
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def status(self) -> ComplianceStatus:
        return get_compliance_status(self.total_emissions_to_date, self.emission_limit)


class SiteMetricsPydModel(BaseModel):
    """Site totals plus read-side reading statistics."""

    site_id: UUID
    name: str
    location: str
    emission_limit: Decimal
    total_emissions_to_date: Decimal
    status: ComplianceStatus
    readings_count: int
    last_reading_at: Optional[datetime] = None


class ReadingPydModel(BaseModel):
    """Model for a stored reading."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    site_id: UUID
    value: Decimal
    recorded_at: datetime
    idempotency_key: str
    created_at: datetime
