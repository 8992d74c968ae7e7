"""
Database engine configuration.

Builds the asyncpg engine and session maker from config, and owns the
startup path that creates the database and applies alembic migrations.
"""
import asyncio
import contextlib
import functools
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as alembic_config
from sqlalchemy import text
from sqlalchemy.engine.url import URL
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from methane_tracker.core.config import Config
from methane_tracker.utils.constants import PG_DUPLICATE_DATABASE

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

engine_kw = {
    "pool_pre_ping": True,
    # emits the equivalent of "SELECT 1" each time a connection is checked out
    "pool_size": 10,  # connections kept open; each in-flight ingestion holds one
    "max_overflow": 20,
    "pool_timeout": 30,
    "connect_args": {
        "prepared_statement_cache_size": 0,  # disable prepared statement cache
        "statement_cache_size": 0,  # disable statement cache
    },
}


def get_db_url(config: Config) -> URL:
    """
    Construct database URL from config.
    """
    config_db = config.data["db"]
    return URL.create(drivername="postgresql+asyncpg", **config_db)


def get_async_engine(async_db_url: URL, **kwargs) -> AsyncEngine:
    """
    Create async database engine with connection pooling.
    """
    options = {
        "poolclass": AsyncAdaptedQueuePool,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
    }
    options.update(kwargs)
    return create_async_engine(async_db_url, **options)


def get_async_session_maker(async_engine: AsyncEngine) -> async_sessionmaker:
    """
    Create async session maker.

    Sessions do not autoflush so that reads inside the ingestion path never
    issue writes implicitly; every write is an explicit statement.
    """
    return async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_database(config: Config) -> bool:
    """
    Ensure the database named in the config exists.

    Connects to the 'postgres' maintenance database to issue CREATE DATABASE.

    Returns:
        True if the database was created, False if it already existed.

    Raises:
        ValueError: If the database name is missing in the configuration.
    """
    logging.info("Creating database...")
    db_params = config.data["db"].copy()
    target_database_name = db_params.pop("database", None)

    if not target_database_name:
        logging.error("Database name not found in configuration for creation.")
        raise ValueError("Database name missing in configuration for creation.")

    if "user" in db_params and "username" not in db_params:
        db_params["username"] = db_params.pop("user")

    maintenance_url = URL.create(
        drivername="postgresql+asyncpg", **{**db_params, "database": "postgres"}
    )
    maintenance_engine = None
    try:
        maintenance_engine = get_async_engine(maintenance_url)
        async with maintenance_engine.connect() as connection:
            # CREATE DATABASE cannot run inside a transaction block
            autocommit_connection = await connection.execution_options(
                isolation_level="AUTOCOMMIT"
            )
            await autocommit_connection.execute(
                text(f'CREATE DATABASE "{target_database_name}"')
            )
        logging.info(f"Database '{target_database_name}' created successfully.")
        return True
    except DBAPIError as e:
        with contextlib.suppress(AttributeError):
            if e.orig is not None and getattr(e.orig, "pgcode", None) == PG_DUPLICATE_DATABASE:
                logging.info(
                    f"Database '{target_database_name}' already exists. No action taken."
                )
                return False

        logging.error(
            f"A DBAPIError occurred while trying to create database '{target_database_name}': {e}"
        )
        raise
    finally:
        if maintenance_engine:
            await maintenance_engine.dispose()


async def apply_db_migration(config: Config):
    """
    Create the database if needed and upgrade it to the latest alembic head.

    Blocks until migrations complete so the schema is consistent before the
    application accepts ingestion requests.
    """
    await create_database(config)

    alembic_cfg = alembic_config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option(
        "script_location", str(PROJECT_ROOT / "alembic_migrations")
    )

    # Alembic runs synchronously through psycopg2
    async_url = get_db_url(config)
    sync_url = async_url.set(drivername="postgresql+psycopg2")
    alembic_cfg.set_main_option(
        "sqlalchemy.url",
        sync_url.render_as_string(hide_password=False).replace("%", "%%"),
    )

    logging.info("Starting database migrations...")
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(
        None, functools.partial(command.upgrade, alembic_cfg, "head")
    )
    logging.info("Database migration completed successfully")
