"""
app/validators/row_validator.py

Row-level validation and type parsing for timesheet rows.
"""

from __future__ import annotations

import hashlib
import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Mapping

from app.domain.timesheet import CanonicalEntry, RowValidationError

MIN_VALID_YEAR = 1900
MAX_VALID_YEAR = 2100

# Spreadsheet serial dates count days from 1899-12-30 (1900 leap-year bug included).
SPREADSHEET_EPOCH = date(1899, 12, 30)

ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
DAY_FIRST_DATE_PATTERN = re.compile(r"^(\d{1,2})\.\s*(\d{1,2})\.\s*(\d{4})$")
SERIAL_DATE_PATTERN = re.compile(r"^\d+(\.\d+)?$")

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y/%m/%d",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M",
)

TRUE_VALUES = {"true", "yes", "1", "approved"}


def derive_stable_id(value: str) -> int:
    """
    Derive a deterministic positive 31-bit identifier from a display name.
    """

    digest = hashlib.sha1(value.strip().encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big") & 0x7FFFFFFF


class TimesheetRowValidator:
    """
    Validates and parses mapped canonical row values.
    """

    def is_completely_empty_row(self, row: Mapping[str, Any]) -> bool:
        """
        Return True when all values in the row are empty or whitespace.
        """

        return all(self._is_blank(value) for value in row.values())

    def validate_mapped_row(
        self,
        *,
        mapped_row: Mapping[str, Any],
        row_number: int,
    ) -> tuple[CanonicalEntry | None, list[RowValidationError]]:
        """
        Validate and parse one canonical mapped row.

        Required-field checks run first; type checks only run when every
        required value is present.
        """

        errors: list[RowValidationError] = []

        person_name = self._parse_required_string(
            value=mapped_row.get("person_name"),
            row_number=row_number,
            column="person_name",
            message="Person name is required.",
            errors=errors,
        )
        project_name = self._parse_required_string(
            value=mapped_row.get("project_name"),
            row_number=row_number,
            column="project_name",
            message="Project name is required.",
            errors=errors,
        )
        activity_name = self._parse_required_string(
            value=mapped_row.get("activity_name"),
            row_number=row_number,
            column="activity_name",
            message="Activity or task name is required.",
            errors=errors,
        )
        raw_date = mapped_row.get("date")
        if self._is_blank(raw_date):
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column="date",
                    message="Date is required.",
                )
            )
        raw_hours = mapped_row.get("hours")
        if self._is_blank(raw_hours):
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column="hours",
                    message="Hours is required.",
                )
            )

        if errors:
            return None, errors

        person_id = self._parse_identifier(
            value=mapped_row.get("person_id"),
            fallback_name=person_name,
            row_number=row_number,
            column="person_id",
            errors=errors,
        )
        project_id = self._parse_identifier(
            value=mapped_row.get("project_id"),
            fallback_name=project_name,
            row_number=row_number,
            column="project_id",
            errors=errors,
        )
        activity_id = self._parse_identifier(
            value=mapped_row.get("activity_id"),
            fallback_name=activity_name,
            row_number=row_number,
            column="activity_id",
            errors=errors,
        )
        hours = self._parse_hours(value=raw_hours, row_number=row_number, errors=errors)
        entry_date = self._parse_date(value=raw_date, row_number=row_number, errors=errors)

        if errors or entry_date is None or hours is None:
            return None, errors

        return (
            CanonicalEntry(
                person_id=person_id,
                person_name=person_name,
                project_id=project_id,
                project_name=project_name,
                activity_id=activity_id,
                activity_name=activity_name,
                date=entry_date,
                hours=hours,
                person_email=self._parse_optional_string(mapped_row.get("person_email")),
                description=self._parse_optional_string(mapped_row.get("description")),
                approved=self._parse_boolean(mapped_row.get("approved")),
                billable=self._parse_boolean(mapped_row.get("billable")),
            ),
            [],
        )

    def _parse_required_string(
        self,
        *,
        value: Any,
        row_number: int,
        column: str,
        message: str,
        errors: list[RowValidationError],
    ) -> str:
        if self._is_blank(value):
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=column,
                    message=message,
                    value=self._stringify_value(value),
                )
            )
            return ""
        return str(value).strip()

    def _parse_identifier(
        self,
        *,
        value: Any,
        fallback_name: str,
        row_number: int,
        column: str,
        errors: list[RowValidationError],
    ) -> int:
        if self._is_blank(value):
            return derive_stable_id(fallback_name)

        if isinstance(value, bool):
            parsed: int | None = None
        elif isinstance(value, int):
            parsed = value
        elif isinstance(value, float) and value.is_integer():
            parsed = int(value)
        else:
            text = str(value).strip()
            parsed = int(text) if re.fullmatch(r"-?\d+", text) else None

        if parsed is None:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=column,
                    message=f"{column} must be a whole number.",
                    value=self._stringify_value(value),
                )
            )
            return 0
        return parsed

    def _parse_hours(
        self,
        *,
        value: Any,
        row_number: int,
        errors: list[RowValidationError],
    ) -> float | None:
        if isinstance(value, bool):
            parsed: float | None = None
        elif isinstance(value, (int, float)):
            parsed = float(value)
        else:
            normalized = str(value).strip().replace(" ", "").replace(",", ".")
            try:
                parsed = float(normalized)
            except ValueError:
                parsed = None

        if parsed is None or not math.isfinite(parsed) or parsed < 0:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column="hours",
                    message="Hours must be a non-negative number.",
                    value=self._stringify_value(value),
                )
            )
            return None
        return parsed

    def _parse_date(
        self,
        *,
        value: Any,
        row_number: int,
        errors: list[RowValidationError],
    ) -> date | None:
        parsed = parse_date_value(value)
        if parsed is None:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column="date",
                    message="Date must be YYYY-MM-DD, D. M. YYYY or a spreadsheet serial date.",
                    value=self._stringify_value(value),
                )
            )
            return None

        if not MIN_VALID_YEAR <= parsed.year <= MAX_VALID_YEAR:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column="date",
                    message=(
                        f"Invalid year in date: {parsed.year}. "
                        f"Expected year between {MIN_VALID_YEAR}-{MAX_VALID_YEAR}."
                    ),
                    value=self._stringify_value(value),
                )
            )
            return None
        return parsed

    def _parse_boolean(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value == 1
        if self._is_blank(value):
            return False
        return str(value).strip().lower() in TRUE_VALUES

    def _parse_optional_string(self, value: Any) -> str | None:
        if self._is_blank(value):
            return None
        return str(value).strip()

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and math.isnan(value):
            return True
        return isinstance(value, str) and not value.strip()

    @staticmethod
    def _stringify_value(value: Any) -> str | None:
        if value is None:
            return None
        return str(value)


def parse_date_value(value: Any) -> date | None:
    """
    Parse one raw date cell into a calendar date, or None when unrecognized.

    Accepts ``datetime``/``date`` objects (pandas ``Timestamp`` included),
    ISO strings, day-first ``D. M. YYYY`` strings and spreadsheet serial numbers.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return _from_serial(float(value))

    text = str(value).strip()
    if not text:
        return None

    iso_match = ISO_DATE_PATTERN.match(text)
    if iso_match:
        return _safe_date(int(iso_match.group(1)), int(iso_match.group(2)), int(iso_match.group(3)))

    day_first_match = DAY_FIRST_DATE_PATTERN.match(text)
    if day_first_match:
        return _safe_date(
            int(day_first_match.group(3)),
            int(day_first_match.group(2)),
            int(day_first_match.group(1)),
        )

    if SERIAL_DATE_PATTERN.match(text):
        return _from_serial(float(text))

    for date_format in DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).date()
        except ValueError:
            continue
    return None


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _from_serial(serial: float) -> date | None:
    if not math.isfinite(serial) or serial <= 0:
        return None
    try:
        converted = SPREADSHEET_EPOCH + timedelta(days=int(serial))
    except OverflowError:
        return None
    if not MIN_VALID_YEAR <= converted.year <= MAX_VALID_YEAR:
        return None
    return converted
