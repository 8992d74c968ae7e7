"""
FastAPI dependencies.
"""
from typing import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from methane_tracker.database.session_manager.db_session import Database
from methane_tracker.services.ingestion import IngestionService
from methane_tracker.utils.constants import DEFAULT_LOCK_TIMEOUT_MS


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Yield a request-scoped session; committed or rolled back on exit."""
    async with Database() as session:
        yield session


async def get_ingestion_service(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> IngestionService:
    """Build an ingestion service bound to the request session."""
    lock_timeout_ms = request.app.state.config.get(
        "ingestion", "lock_timeout_ms", DEFAULT_LOCK_TIMEOUT_MS
    )
    return IngestionService(session, lock_timeout_ms=int(lock_timeout_ms))
