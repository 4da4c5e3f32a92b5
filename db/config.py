"""
db/config.py

Environment-driven database configuration for the timesheet store.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

ENV_FILES = (".env", ".env.local")
CLOUD_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})


def load_env_files(project_root: Path | None = None) -> None:
    """
    Load KEY=VALUE pairs from ``.env`` and ``.env.local`` when present.

    Variables already set in the process environment win.
    """

    root = project_root or Path(__file__).resolve().parents[1]
    for filename in ENV_FILES:
        env_path = root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if line.startswith("export "):
                line = line[len("export "):].lstrip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_postgres_url(url: str) -> str:
    """Rewrite postgres URLs to the psycopg 3 driver form."""

    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """
    Resolve the database URL from the environment.

    Priority:
    1) TIMESHEET_DATABASE_URL
    2) DATABASE_URL
    3) CLOUD_DATABASE_URL when ENVIRONMENT is cloud-like
    4) LOCAL_DATABASE_URL
    """

    load_env_files()

    for name in ("TIMESHEET_DATABASE_URL", "DATABASE_URL"):
        direct_url = os.getenv(name, "").strip()
        if direct_url:
            return normalize_postgres_url(direct_url)

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    cloud_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    if environment in CLOUD_ENVIRONMENTS and cloud_url:
        return normalize_postgres_url(cloud_url)

    local_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
    if local_url:
        return normalize_postgres_url(local_url)

    raise RuntimeError(
        "No database URL configured. Set TIMESHEET_DATABASE_URL or DATABASE_URL, "
        "or configure LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
    )


def redact_database_url(url: str) -> str:
    """Return ``url`` with its password replaced, for log lines."""

    parts = urlsplit(url)
    if not parts.password:
        return url
    netloc = parts.netloc.rsplit("@", 1)[1]
    user = parts.username or ""
    return urlunsplit(parts._replace(netloc=f"{user}:***@{netloc}"))
