from __future__ import annotations

import asyncio
import logging
import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

# --- Ensure src/ on sys.path ---
ROOT = Path(__file__).resolve().parents[1]  # migrations/ -> project root
SRC = str(ROOT / "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from medportal.db.base import Base  # noqa: E402
from medportal.db.settings import DBSettings  # noqa: E402
import medportal.documents.models  # noqa: E402,F401  registers the documents table

# --- Logging: app logging unless ALEMBIC_USE_APP_LOGGING=0 ---
config = context.config
if os.getenv("ALEMBIC_USE_APP_LOGGING", "1") == "1":
    from medportal.app.logging import setup_logging

    setup_logging()
elif config.config_file_name is not None:
    fileConfig(config.config_file_name)

log = logging.getLogger("alembic.env")

# --- Database URL: DB_DATABASE_URL / DATABASE_URL win over alembic.ini ---
settings = DBSettings()
if settings.database_url or os.getenv("DATABASE_URL"):
    config.set_main_option("sqlalchemy.url", settings.resolved_database_url)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    url = config.get_main_option("sqlalchemy.url")
    log.info("Running migrations against %s", url.split("@")[-1] if url else url)
    connectable = create_async_engine(url, poolclass=pool.NullPool)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
