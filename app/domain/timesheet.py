"""
app/domain/timesheet.py

Domain models shared by timesheet parsing, import and analytics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class CanonicalEntry:
    """
    One validated, normalized time entry ready for import.
    """

    person_id: int
    person_name: str
    project_id: int
    project_name: str
    activity_id: int
    activity_name: str
    date: date
    hours: float
    person_email: str | None = None
    description: str | None = None
    approved: bool = False
    billable: bool = False


@dataclass(frozen=True)
class StoredEntry:
    """
    A canonical entry as returned by the entry store, with persistence metadata.
    """

    id: str
    person_id: int
    person_name: str
    project_id: int
    project_name: str
    activity_id: int
    activity_name: str
    date: date
    hours: float
    person_email: str | None = None
    description: str | None = None
    approved: bool = False
    billable: bool = False
    project_category: str = "Other"
    upload_id: str | None = None
    source_row: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RowValidationError:
    """
    One row-level validation error detail.

    ``row_number`` is the 1-based position of the data row in the source sheet.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing one source file.

    ``entry_rows`` holds the source row number of each entry, in order.
    """

    entries: list[CanonicalEntry]
    errors: list[RowValidationError]
    total_rows: int
    sheet_name: str | None = None
    entry_rows: list[int] = field(default_factory=list)

    @property
    def valid_rows(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class EntryFilter:
    """
    Filter passed to the entry store when listing entries.
    """

    date_from: date | None = None
    date_to: date | None = None
    person_name: str | None = None
    upload_id: str | None = None
