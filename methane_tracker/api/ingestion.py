"""
Ingestion API router.

Accepts batches of methane readings. Clients that time out should resend the
same payload with the same batch_key; the batch is counted once.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from methane_tracker.core.dependencies import get_ingestion_service
from methane_tracker.pydantic_models.ingestion import (
    IngestReadingsRequest,
    IngestionResultPydModel,
)
from methane_tracker.services.ingestion import (
    IngestionRetryableError,
    IngestionService,
    SiteNotFoundError,
)

router = APIRouter(
    prefix="/api/v1/ingest",
    tags=["Ingestion"],
)

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = "1"


@router.post("", response_model=IngestionResultPydModel)
async def ingest_readings(
    payload: IngestReadingsRequest,
    service: IngestionService = Depends(get_ingestion_service),
):
    """
    Ingest a batch of 1-100 readings for a site.

    Returns ``duplicate: true`` with the originally recorded totals when the
    batch_key was already processed.

    Example:
        ```
        POST /api/v1/ingest
        {
            "site_id": "0b4c...",
            "batch_key": "6f1c2d0e-9a57-4a43-9a37-6f4b0b7a2c11",
            "readings": [{"value": 100, "recorded_at": "2026-02-10T12:00:00Z"}]
        }
        ```
    """
    try:
        return await service.ingest(payload)
    except SiteNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except IngestionRetryableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
            headers={"Retry-After": RETRY_AFTER_SECONDS},
        )
