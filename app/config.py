"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024

DEFAULT_CATEGORY_PRIORITY: tuple[str, ...] = (
    "OPS_Hiring",
    "OPS_Jobs",
    "OPS_Reviews",
    "OPS_Guiding",
)

DEFAULT_CATEGORIZED_PROJECTS: tuple[str, ...] = ("OPS", "Guiding")


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list, preserving order and dropping blanks.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class TimesheetImportSettings:
    """
    Runtime settings for timesheet parsing and import.
    """

    batch_size: int = 1000
    max_validation_errors: int = 100
    max_reported_validation_errors: int = 10
    log_validation_errors: bool = True
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES


@dataclass(frozen=True)
class AnalyticsSettings:
    """
    Settings for FTE, categorization and metrics calculations.
    """

    standard_daily_hours: float = 8.0
    categorized_project_categories: tuple[str, ...] = DEFAULT_CATEGORIZED_PROJECTS
    category_priority: tuple[str, ...] = DEFAULT_CATEGORY_PRIORITY
    fallback_category: str = "Unpaired"
    fte_target_tolerance: float = 0.0


@lru_cache(maxsize=1)
def get_timesheet_import_settings() -> TimesheetImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return TimesheetImportSettings(
        batch_size=max(1, _get_int_env("TIMESHEET_IMPORT_BATCH_SIZE", 1000)),
        max_validation_errors=max(1, _get_int_env("TIMESHEET_IMPORT_MAX_VALIDATION_ERRORS", 100)),
        max_reported_validation_errors=max(1, _get_int_env("TIMESHEET_IMPORT_MAX_REPORTED_ERRORS", 10)),
        log_validation_errors=_get_bool_env("TIMESHEET_IMPORT_LOG_VALIDATION_ERRORS", True),
        max_file_size_bytes=max(
            1,
            _get_int_env("TIMESHEET_IMPORT_MAX_FILE_SIZE_BYTES", DEFAULT_MAX_FILE_SIZE_BYTES),
        ),
    )


@lru_cache(maxsize=1)
def get_analytics_settings() -> AnalyticsSettings:
    """
    Return cached analytics settings from environment variables.
    """

    return AnalyticsSettings(
        standard_daily_hours=max(0.0, _get_float_env("ANALYTICS_STANDARD_DAILY_HOURS", 8.0)),
        categorized_project_categories=_get_list_env(
            "ANALYTICS_CATEGORIZED_PROJECTS", DEFAULT_CATEGORIZED_PROJECTS
        ),
        category_priority=_get_list_env("ANALYTICS_CATEGORY_PRIORITY", DEFAULT_CATEGORY_PRIORITY),
        fallback_category=_get_str_env("ANALYTICS_FALLBACK_CATEGORY", "Unpaired"),
        fte_target_tolerance=max(0.0, _get_float_env("ANALYTICS_FTE_TARGET_TOLERANCE", 0.0)),
    )
