"""
Alembic Migration Environment
===============================

What:  Runs the contacts migrations, online through the async engine or
       offline as plain SQL.
Who:   Called by `alembic` CLI commands (upgrade, downgrade, revision) and by
       the migration tests, which pass their own sqlalchemy.url.

URL resolution: an explicit `sqlalchemy.url` (alembic.ini, -x or a
programmatic Config) wins; otherwise DATABASE_URL via the application
settings.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from contacts_api.config import settings
from contacts_api.database import Base

# Registers the contacts table on Base.metadata
from contacts_api.models.contact import Contact  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def get_url() -> str:
    url = config.get_main_option("sqlalchemy.url") or settings.database_url
    config.set_main_option("sqlalchemy.url", url)
    return url


def context_options(url: str) -> dict:
    """Options shared by offline and online runs."""
    return dict(
        target_metadata=Base.metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
    )


def run_migrations_offline(url: str) -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **context_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection, url: str) -> None:
    context.configure(connection=connection, **context_options(url))
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online(url: str) -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations, url)
    finally:
        await connectable.dispose()


database_url = get_url()
if context.is_offline_mode():
    run_migrations_offline(database_url)
else:
    asyncio.run(run_migrations_online(database_url))
