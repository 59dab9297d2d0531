"""Alembic env.py: async SQLAlchemy support.

``alembic -x db_url=sqlite+aiosqlite:///tickler.db upgrade head`` migrates a
database other than the one in settings. SQLite runs in batch mode so column
changes work through table copies.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from tickler.config import Settings, get_settings
from tickler.db.session import Base
from tickler.models import *  # noqa: F401, F403

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _settings() -> Settings:
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    return Settings(db_url=override) if override else get_settings()


def _configure(**kwargs) -> None:
    url = _settings().database_url
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    # Offline SQL is rendered with the sync driver's dialect.
    _configure(
        url=_settings().database_url_sync,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = async_engine_from_config(
        {"sqlalchemy.url": _settings().database_url},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
