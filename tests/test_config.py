from __future__ import annotations

from collections.abc import Iterator

import pytest

from app import config
from db.config import normalize_postgres_url, redact_database_url, resolve_database_url


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    config.get_timesheet_import_settings.cache_clear()
    config.get_analytics_settings.cache_clear()
    yield
    config.get_timesheet_import_settings.cache_clear()
    config.get_analytics_settings.cache_clear()


def test_import_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TIMESHEET_IMPORT_BATCH_SIZE",
        "TIMESHEET_IMPORT_MAX_VALIDATION_ERRORS",
        "TIMESHEET_IMPORT_MAX_FILE_SIZE_BYTES",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = config.get_timesheet_import_settings()

    assert settings.batch_size == 1000
    assert settings.max_validation_errors == 100
    assert settings.max_file_size_bytes == 10 * 1024 * 1024


def test_import_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIMESHEET_IMPORT_BATCH_SIZE", "250")
    monkeypatch.setenv("TIMESHEET_IMPORT_LOG_VALIDATION_ERRORS", "no")
    monkeypatch.setenv("TIMESHEET_IMPORT_MAX_VALIDATION_ERRORS", "not-a-number")

    settings = config.get_timesheet_import_settings()

    assert settings.batch_size == 250
    assert settings.log_validation_errors is False
    assert settings.max_validation_errors == 100


def test_analytics_settings_lists(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANALYTICS_CATEGORY_PRIORITY", "OPS_Jobs, OPS_Hiring,,")
    monkeypatch.setenv("ANALYTICS_STANDARD_DAILY_HOURS", "7.5")
    monkeypatch.delenv("ANALYTICS_CATEGORIZED_PROJECTS", raising=False)

    settings = config.get_analytics_settings()

    assert settings.category_priority == ("OPS_Jobs", "OPS_Hiring")
    assert settings.categorized_project_categories == ("OPS", "Guiding")
    assert settings.standard_daily_hours == pytest.approx(7.5)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgres://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql+psycopg://u@h/db", "postgresql+psycopg://u@h/db"),
    ],
)
def test_normalize_postgres_url(raw: str, expected: str) -> None:
    assert normalize_postgres_url(raw) == expected


def test_timesheet_url_has_priority(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIMESHEET_DATABASE_URL", "postgres://t@h/timesheets")
    monkeypatch.setenv("DATABASE_URL", "postgres://d@h/other")

    assert resolve_database_url() == "postgresql+psycopg://t@h/timesheets"


def test_redact_database_url() -> None:
    assert redact_database_url("postgresql+psycopg://app:secret@db:5432/ts") == "postgresql+psycopg://app:***@db:5432/ts"
    assert redact_database_url("postgresql+psycopg://db/ts") == "postgresql+psycopg://db/ts"
