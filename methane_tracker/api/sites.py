"""
Sites API router.

Site registration and read-only reporting. Running totals shown here are
the pre-computed values maintained by ingestion.
"""

import logging
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from methane_tracker.core.dependencies import get_db_session
from methane_tracker.database.repositories import MeasurementRepository, SiteRepository
from methane_tracker.pydantic_models.site import (
    ReadingPydModel,
    SiteCreate,
    SiteMetricsPydModel,
    SitePydModel,
)
from methane_tracker.services.compliance import get_compliance_status

router = APIRouter(
    prefix="/api/v1/sites",
    tags=["Sites"],
)

logger = logging.getLogger(__name__)


async def _get_site_or_404(repo: SiteRepository, site_id: UUID):
    site = await repo.get_by_id(site_id)
    if not site:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Site {site_id} not found",
        )
    return site


@router.post("", response_model=SitePydModel, status_code=status.HTTP_201_CREATED)
async def create_site(
    payload: SiteCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """Register a site. Its running total starts at zero."""
    repo = SiteRepository(session)
    site = await repo.create(
        **payload.model_dump(),
        total_emissions_to_date=Decimal("0"),
    )
    await session.commit()
    logger.info(f"Created site {site.id} ({site.name}) with limit {site.emission_limit}")
    return SitePydModel.model_validate(site)


@router.get("", response_model=list[SitePydModel])
async def list_sites(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
):
    """List sites with their compliance status."""
    repo = SiteRepository(session)
    sites = await repo.list_sites(skip=skip, limit=limit)
    return [SitePydModel.model_validate(site) for site in sites]


@router.get("/{site_id}", response_model=SitePydModel)
async def get_site(
    site_id: UUID,
    session: AsyncSession = Depends(get_db_session),
):
    """Get a site by ID."""
    site = await _get_site_or_404(SiteRepository(session), site_id)
    return SitePydModel.model_validate(site)


@router.get("/{site_id}/metrics", response_model=SiteMetricsPydModel)
async def get_site_metrics(
    site_id: UUID,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Site totals plus reading statistics.

    ``total_emissions_to_date`` comes from the site row; only the reading
    count and latest timestamp are queried from the measurements table.
    """
    site = await _get_site_or_404(SiteRepository(session), site_id)
    readings_count, last_reading_at = await MeasurementRepository(session).get_site_stats(
        site_id
    )

    return SiteMetricsPydModel(
        site_id=site.id,
        name=site.name,
        location=site.location,
        emission_limit=site.emission_limit,
        total_emissions_to_date=site.total_emissions_to_date,
        status=get_compliance_status(site.total_emissions_to_date, site.emission_limit),
        readings_count=readings_count,
        last_reading_at=last_reading_at,
    )


@router.get("/{site_id}/readings", response_model=list[ReadingPydModel])
async def list_site_readings(
    site_id: UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    session: AsyncSession = Depends(get_db_session),
):
    """Readings for a site ordered by sensor timestamp, newest first."""
    await _get_site_or_404(SiteRepository(session), site_id)
    readings = await MeasurementRepository(session).get_by_site(
        site_id, skip=skip, limit=limit
    )
    return [ReadingPydModel.model_validate(reading) for reading in readings]
