"""
app/services/timesheet_parser.py

Parsing of uploaded timesheet exports into canonical entries.

The parser never persists anything. It reads the file, picks the first sheet
whose headers satisfy the required canonical fields, and validates every
non-blank row independently, so one bad row never hides the rest.
"""

from __future__ import annotations

import logging
from typing import Mapping

from app.domain.timesheet import CanonicalEntry, ParseResult, RowValidationError
from app.mappers.schema_mapper import MappingResolution, SchemaMapper
from app.readers.tabular_reader import RawSheet, TabularReadError, read_tabular
from app.validators.mapping_validator import MappingErrorDetail, SchemaMappingError, missing_required_fields
from app.validators.row_validator import TimesheetRowValidator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TimesheetStructureError(ValueError):
    """
    Raised when the uploaded file cannot be read as a timesheet at all.
    """


class TimesheetSchemaMappingError(TimesheetStructureError):
    """
    Raised when no sheet carries the required timesheet columns.
    """

    def __init__(self, *, message: str, errors: list[MappingErrorDetail], sheet_name: str | None = None) -> None:
        super().__init__(message)
        self.errors = tuple(errors)
        self.sheet_name = sheet_name

    @property
    def missing_fields(self) -> list[str]:
        return missing_required_fields(self.errors)

    def to_dict(self) -> dict[str, object]:
        return {
            "message": str(self),
            "sheet_name": self.sheet_name,
            "errors": [error.to_dict() for error in self.errors],
        }


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TimesheetParser:
    """
    Turns raw file bytes into canonical entries plus per-row errors.
    """

    def __init__(
        self,
        *,
        mapper: SchemaMapper | None = None,
        validator: TimesheetRowValidator | None = None,
        log_validation_errors: bool = True,
        max_logged_errors: int = 100,
    ) -> None:
        self._mapper = mapper or SchemaMapper()
        self._validator = validator or TimesheetRowValidator()
        self._log_validation_errors = log_validation_errors
        self._max_logged_errors = max(0, max_logged_errors)

    def parse_file(
        self,
        data: bytes,
        *,
        file_type: str,
        manual_overrides: Mapping[str, str] | None = None,
    ) -> ParseResult:
        """
        Read and parse one uploaded file.
        """

        try:
            sheets = read_tabular(data, file_type=file_type)
        except TabularReadError as exc:
            raise TimesheetStructureError(str(exc)) from exc

        if not sheets:
            raise TimesheetStructureError("Workbook has no sheets.")

        sheet, mapping = self._select_sheet(sheets, manual_overrides=manual_overrides)
        return self.parse_sheet(sheet, mapping=mapping)

    def parse_sheet(self, sheet: RawSheet, *, mapping: MappingResolution) -> ParseResult:
        """
        Validate every non-blank row of an already-mapped sheet.
        """

        entries: list[CanonicalEntry] = []
        entry_rows: list[int] = []
        errors: list[RowValidationError] = []
        total_rows = 0

        for row_number, raw_row in sheet.rows:
            if self._validator.is_completely_empty_row(raw_row):
                continue
            total_rows += 1

            mapped_row = self._mapper.map_row(raw_row=raw_row, mapping=mapping)
            entry, row_errors = self._validator.validate_mapped_row(
                mapped_row=mapped_row,
                row_number=row_number,
            )
            if row_errors:
                for error in row_errors:
                    self._record_error(errors, error)
                continue
            if entry is not None:
                entries.append(entry)
                entry_rows.append(row_number)

        logger.info(
            "Parsed timesheet sheet=%r total_rows=%d valid_rows=%d errors=%d",
            sheet.name,
            total_rows,
            len(entries),
            len(errors),
        )
        return ParseResult(
            entries=entries,
            errors=errors,
            total_rows=total_rows,
            sheet_name=sheet.name,
            entry_rows=entry_rows,
        )

    def _select_sheet(
        self,
        sheets: list[RawSheet],
        *,
        manual_overrides: Mapping[str, str] | None,
    ) -> tuple[RawSheet, MappingResolution]:
        first_error: SchemaMappingError | None = None
        for sheet in sheets:
            try:
                mapping = self._mapper.resolve_mapping(sheet.headers, manual_overrides=manual_overrides)
            except SchemaMappingError as exc:
                logger.debug("Sheet %r skipped: %s", sheet.name, exc.message)
                if first_error is None:
                    first_error = exc
                continue
            return sheet, mapping

        assert first_error is not None
        raise TimesheetSchemaMappingError(
            message=first_error.message,
            errors=list(first_error.errors),
            sheet_name=sheets[0].name,
        ) from first_error

    def _record_error(self, errors: list[RowValidationError], error: RowValidationError) -> None:
        if self._log_validation_errors and len(errors) < self._max_logged_errors:
            logger.warning(
                "Timesheet validation error row=%s column=%s message=%s value=%r",
                error.row_number,
                error.column,
                error.message,
                error.value,
            )
        errors.append(error)
