"""
SQLAlchemy database models (schemas).
"""
from methane_tracker.database.schemas.ingestion_log import IngestionLogDBModel
from methane_tracker.database.schemas.measurement import MeasurementDBModel
from methane_tracker.database.schemas.site import SiteDBModel

__all__ = [
    "IngestionLogDBModel",
    "MeasurementDBModel",
    "SiteDBModel",
]
