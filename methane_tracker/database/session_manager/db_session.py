"""
Async session manager.

``Database.init`` is called once per process (app lifespan, CLI, test
fixtures); ``async with Database() as session`` then yields a session that is
committed on clean exit and rolled back when the block raises.
"""
import logging
from typing import Any, Optional

from sqlalchemy.engine.url import URL
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from methane_tracker.database.base import get_async_engine, get_async_session_maker
from methane_tracker.database.session_manager.exceptions import DatabaseNotInitialized

logger = logging.getLogger(__name__)


class Database:
    _async_engine: Optional[AsyncEngine] = None
    _async_session_maker: Optional[async_sessionmaker] = None

    def __init__(self):
        self.session: Optional[AsyncSession] = None

    @classmethod
    def init(cls, async_db_url: URL, engine_kw: Optional[dict[str, Any]] = None):
        """Create the engine and session maker shared by all sessions."""
        cls._async_engine = get_async_engine(async_db_url, **(engine_kw or {}))
        cls._async_session_maker = get_async_session_maker(cls._async_engine)
        logger.debug(f"Database initialized for {async_db_url.render_as_string()}")

    @classmethod
    async def dispose(cls):
        """Close every pooled connection and forget the engine."""
        if cls._async_engine is not None:
            await cls._async_engine.dispose()
        cls._async_engine = None
        cls._async_session_maker = None

    @classmethod
    def session_maker(cls) -> async_sessionmaker:
        if cls._async_session_maker is None:
            raise DatabaseNotInitialized(
                "Database not initialized. Call Database.init() first."
            )
        return cls._async_session_maker

    async def __aenter__(self) -> AsyncSession:
        self.session = self.session_maker()()
        return self.session

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None:
                await self.session.rollback()
            else:
                await self.session.commit()
        finally:
            await self.session.close()
