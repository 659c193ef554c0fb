import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from brew_cafe.config import settings
from brew_cafe.db.base import Base
import brew_cafe.models  # noqa: F401  регистрирует модели в metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# синхронные драйверы для offline-режима
SYNC_DRIVERS = {"asyncpg": "psycopg2", "aiosqlite": "pysqlite"}


def sync_url(url: str) -> str:
    for async_driver, sync_driver in SYNC_DRIVERS.items():
        url = url.replace(f"+{async_driver}", f"+{sync_driver}")
    return url


def run_migrations_offline():
    """Offline mode: печатает SQL без подключения к базе."""
    context.configure(
        url=sync_url(settings.DATABASE_URL),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online():
    """Async → sync через run_sync."""
    connectable = create_async_engine(settings.DATABASE_URL, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
