"""
Pydantic models for batch ingestion.
"""

from decimal import Decimal
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, Field, field_validator

from methane_tracker.utils.constants import (
    EMISSION_PRECISION,
    EMISSION_SCALE,
    MAX_READINGS_PER_BATCH,
    MIN_READINGS_PER_BATCH,
)
from methane_tracker.utils.decimals import quantize_emission


class ReadingIn(BaseModel):
    """A single sensor reading inside a batch."""

    value: Decimal = Field(
        ...,
        ge=0,
        max_digits=EMISSION_PRECISION,
        decimal_places=EMISSION_SCALE,
        description="Methane reading in kg (non-negative)",
        examples=[Decimal("12.5")],
    )
    recorded_at: AwareDatetime = Field(
        ...,
        description="Sensor timestamp (ISO 8601 with timezone)",
        examples=["2026-02-10T12:00:00Z"],
    )


class IngestReadingsRequest(BaseModel):
    """Batch of readings for one site, identified by a client batch key."""

    site_id: UUID = Field(..., description="Target site")
    batch_key: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Client supplied, globally unique batch identifier; reuse it on retry",
        examples=["6f1c2d0e-9a57-4a43-9a37-6f4b0b7a2c11"],
    )
    readings: list[ReadingIn] = Field(
        ...,
        min_length=MIN_READINGS_PER_BATCH,
        max_length=MAX_READINGS_PER_BATCH,
        description="Between 1 and 100 readings",
    )

    @field_validator("batch_key")
    @classmethod
    def batch_key_is_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("batch_key must not be blank")
        return value


class IngestionResultPydModel(BaseModel):
    """Outcome of an ingestion request, identical in shape for new and duplicate batches."""

    batch_key: str
    readings_processed: int = Field(..., description="Number of readings in the batch")
    total_value: Decimal = Field(..., description="Sum of the batch's reading values (kg)")
    duplicate: bool = Field(
        ..., description="True when the batch had already been processed"
    )

    @field_validator("total_value")
    @classmethod
    def normalise_scale(cls, value: Decimal) -> Decimal:
        return quantize_emission(value)
