"""
Alembic environment.

``sqlalchemy.url`` is injected by ``apply_db_migration``; when alembic is
run from the command line it is built from the ENVIRONMENT config file.
"""
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from methane_tracker.core.config import get_config
from methane_tracker.database import Base
from methane_tracker.database.base import get_db_url
from methane_tracker.database.schemas import (  # noqa: F401 - register models
    IngestionLogDBModel,
    MeasurementDBModel,
    SiteDBModel,
)

config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def get_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    app_config = get_config(f"{os.environ.get('ENVIRONMENT', 'development')}.toml")
    sync_url = get_db_url(app_config).set(drivername="postgresql+psycopg2")
    return sync_url.render_as_string(hide_password=False)


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = get_url()
    connectable = engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
