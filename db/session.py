"""
db/session.py

SQLAlchemy engine and session factory for the timesheet database.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.logging_utils import log_event
from db.config import redact_database_url, resolve_database_url

logger = logging.getLogger(__name__)


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def create_db_engine(database_url: str | None = None) -> Engine:
    url = database_url or resolve_database_url()
    if not url.startswith("postgresql"):
        # ON CONFLICT inserts and JSONB columns need PostgreSQL.
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    log_event(logger, logging.INFO, "db_engine_created", url=redact_database_url(url))
    return create_engine(
        url,
        echo=_get_bool_env("SQL_ECHO", default=False),
        pool_pre_ping=True,
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
        pool_size=_get_int_env("DB_POOL_SIZE", 5),
        max_overflow=_get_int_env("DB_MAX_OVERFLOW", 10),
    )


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def _get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


def SessionLocal() -> Session:
    """Open a new session bound to the shared engine."""
    return _get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Yield a session and close it afterwards.

    Repositories commit their own work; anything left pending when the block
    raises is rolled back.
    """

    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
