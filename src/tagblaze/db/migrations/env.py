"""Alembic environment for the TagBlaze schema.

Learn: Migrations connect through the same build_engine() the app uses, so
a SQLite file gets foreign keys switched on here too and PostgreSQL goes
through asyncpg. Which database:

    alembic upgrade head                                # TAGBLAZE_DATABASE_URL
    alembic -x database_url=sqlite+aiosqlite:///t.db upgrade head

alembic.ini never carries a URL. SQLite cannot ALTER most constraints in
place, so on SQLite autogenerate renders batch operations (copy-and-move).
"""

import asyncio
from logging.config import fileConfig

from alembic import context

from tagblaze.config import settings
from tagblaze.db.engine import build_engine
from tagblaze.db.models import Base

config = context.config

# Callers embedding Alembic (tests) set configure_logger=False to keep
# their own logging setup.
if config.config_file_name is not None and config.attributes.get(
    "configure_logger", True
):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def resolve_database_url() -> str:
    """-x database_url=... wins over TAGBLAZE_DATABASE_URL."""
    return context.get_x_argument(as_dictionary=True).get(
        "database_url", settings.database_url
    )


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL for the target dialect without connecting."""
    url = resolve_database_url()
    _configure(
        url,
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations(url: str) -> None:
    engine = build_engine(url)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_on_connection, url)
    finally:
        await engine.dispose()


def _run_on_connection(connection, url: str) -> None:
    _configure(url, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations(resolve_database_url()))


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
