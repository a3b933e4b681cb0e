"""Alembic environment for the sync tables, run through the async engine.

PostgreSQL is the production target.  SQLite URLs are accepted for local
runs; there batch mode is enabled and schema isolation is skipped.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from civic_sync.core.config import get_settings

# Import all models so they are registered with Base.metadata
from civic_sync.models import County, FallbackCounty, FallbackOfficial, Official, SyncLog  # noqa: F401
from civic_sync.models.base import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _migration_target() -> tuple[str, str | None]:
    """Database URL and optional schema from application settings."""
    settings = get_settings()
    return settings.database_url, settings.database_schema


def run_migrations_offline() -> None:
    """Emit migration SQL without connecting."""
    url, schema = _migration_target()
    configure_kwargs: dict[str, object] = {
        "url": url,
        "target_metadata": target_metadata,
        "literal_binds": True,
        "dialect_opts": {"paramstyle": "named"},
        "compare_type": True,
    }
    if schema is not None:
        configure_kwargs["version_table_schema"] = schema
    context.configure(**configure_kwargs)

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations synchronously within a connection."""
    _, schema = _migration_target()
    is_sqlite = connection.dialect.name == "sqlite"
    configure_kwargs: dict[str, object] = {
        "connection": connection,
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": is_sqlite,
    }
    if schema is not None and not is_sqlite:
        connection.execute(text(f'SET search_path TO "{schema}", public'))
        configure_kwargs["version_table_schema"] = schema
    context.configure(**configure_kwargs)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Create the schema if requested, then migrate over an async connection."""
    url, schema = _migration_target()
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = url

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        if schema is not None and connection.dialect.name != "sqlite":
            await connection.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{schema}"'))
            await connection.commit()
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
