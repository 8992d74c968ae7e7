"""
Database repositories for data access layer.

Provides clean abstraction over database operations following repository pattern.
"""
from methane_tracker.database.repositories.base import BaseRepository
from methane_tracker.database.repositories.ingestion_log import IngestionLogRepository
from methane_tracker.database.repositories.measurement import MeasurementRepository
from methane_tracker.database.repositories.site import SiteRepository

__all__ = [
    "BaseRepository",
    "IngestionLogRepository",
    "MeasurementRepository",
    "SiteRepository",
]
