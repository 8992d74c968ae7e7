"""
Pytest configuration and fixtures.

Tests run against the PostgreSQL database named in test.toml; tables are
recreated for every test.
"""
import logging

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from methane_tracker.core.config import get_config
from methane_tracker.create_app import get_app
from methane_tracker.database import Base
from methane_tracker.database.base import create_database, get_db_url
from methane_tracker.database.schemas import (  # noqa: F401 - register models
    IngestionLogDBModel,
    MeasurementDBModel,
    SiteDBModel,
)
from methane_tracker.database.session_manager.db_session import Database
from methane_tracker.utils.constants import ConfigFile

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

_test_database_created = False


@pytest.fixture(scope="session")
def test_config():
    """
    Get test configuration.

    Returns configuration with test database settings.
    """
    return get_config(ConfigFile.TEST)


@pytest_asyncio.fixture(scope="function")
async def test_async_engine(test_config):
    """
    Engine used only for schema setup and teardown.

    Creates the test database on first use.
    """
    global _test_database_created
    if not _test_database_created:
        await create_database(test_config)
        _test_database_created = True

    test_engine = create_async_engine(get_db_url(test_config), poolclass=NullPool)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function", autouse=True)
async def db_cleanup(test_async_engine):
    """
    Drop and recreate all tables around each test.
    """
    async with test_async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function", autouse=True)
async def initialize_db_session(test_config, db_cleanup):
    """
    Initialize the Database singleton used by the app, services and factories.

    The pool is large enough for the concurrent ingestion tests, where every
    in-flight request holds its own connection.
    """
    engine_kw = {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 10,
        "connect_args": {
            "prepared_statement_cache_size": 0,
            "statement_cache_size": 0,
        },
    }

    Database.init(get_db_url(test_config), engine_kw=engine_kw)

    yield

    await Database.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_app(test_config):
    """
    Create FastAPI application with test configuration.
    """
    app = get_app(ConfigFile.TEST)
    app.state.config = test_config

    yield app


@pytest_asyncio.fixture(scope="function")
async def test_async_client(test_app):
    """
    Async HTTP client bound to the app through ASGITransport.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(
        transport=transport, base_url="http://localhost:8000", follow_redirects=True
    ) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def test_db_session():
    """
    Provide database session for tests.
    """
    async with Database() as session:
        yield session
