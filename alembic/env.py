"""
alembic/env.py

Migration environment for the timesheet schema.
"""

from __future__ import annotations

import logging
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import load_env_files, normalize_postgres_url, redact_database_url, resolve_database_url
from db.models import (  # noqa: F401  imports trigger Base.metadata registration
    ActivityKeyword,
    PlannedFTE,
    PublicHoliday,
    TimesheetEntry,
    UploadHistory,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")
target_metadata = Base.metadata


def _migration_url() -> str:
    """
    Resolve the database URL for migrations.

    Priority:
    1) `-x db_url=...` for a one-off target
    2) ALEMBIC_DATABASE_URL
    3) sqlalchemy.url from alembic.ini
    4) the application's own resolution (db.config.resolve_database_url)
    """

    load_env_files()

    x_args = context.get_x_argument(as_dictionary=True)
    candidates = (
        x_args.get("db_url", ""),
        os.getenv("ALEMBIC_DATABASE_URL", ""),
        config.get_main_option("sqlalchemy.url") or "",
    )
    url = next((value.strip() for value in candidates if value and value.strip()), "")
    url = normalize_postgres_url(url) if url else resolve_database_url()

    if not url.startswith("postgresql"):
        raise RuntimeError("Timesheet migrations target PostgreSQL only.")

    logger.info("Running timesheet migrations against %s", redact_database_url(url))
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=_migration_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _migration_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
