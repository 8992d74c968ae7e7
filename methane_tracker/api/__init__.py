"""
API routers module.
"""
from methane_tracker.api.ingestion import router as ingestion_router
from methane_tracker.api.sites import router as sites_router

__all__ = [
    "ingestion_router",
    "sites_router",
]
