"""
app/services/timesheet_upload_service.py

Validate-before-import orchestration for one uploaded timesheet file.

Stages and their failure modes:

1. Metadata check (extension, size)      -> TimesheetStructureError
2. Read + header mapping                  -> TimesheetStructureError / TimesheetSchemaMappingError
3. Row validation (any error rejects all) -> TimesheetValidationFailedError
4. Import (dedup + persist)               -> UploadBatch with completed/partial/failed status
"""

from __future__ import annotations

import logging
from typing import Mapping

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.config import get_timesheet_import_settings
from app.domain.timesheet import RowValidationError
from app.domain.upload import UploadBatch
from app.logging_utils import log_event
from app.repositories.timesheet_entry_repository import TimesheetEntryRepository
from app.repositories.upload_history_repository import UploadHistoryRepository
from app.schemas.timesheet_upload import UploadMetadata
from app.services.timesheet_import_service import TimesheetImportService
from app.services.timesheet_parser import TimesheetParser, TimesheetStructureError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TimesheetValidationFailedError(ValueError):
    """
    Raised when at least one row failed validation; nothing was imported.
    """

    def __init__(
        self,
        *,
        errors: list[RowValidationError],
        total_errors: int,
        total_rows: int,
        valid_rows: int,
        max_reported_errors: int,
    ) -> None:
        super().__init__(f"Found {total_errors} validation error(s) in {total_rows} rows.")
        self.errors = errors
        self.total_errors = total_errors
        self.total_rows = total_rows
        self.valid_rows = valid_rows
        self._max_reported_errors = max(1, max_reported_errors)

    @property
    def preview(self) -> list[RowValidationError]:
        return self.errors[: self._max_reported_errors]

    def to_dict(self) -> dict[str, object]:
        return {
            "message": str(self),
            "total_rows": self.total_rows,
            "valid_rows": self.valid_rows,
            "total_errors": self.total_errors,
            "validation_errors": [
                {
                    "row_number": error.row_number,
                    "column": error.column,
                    "message": error.message,
                    "value": error.value,
                }
                for error in self.errors
            ],
        }


class EmptyTimesheetError(ValueError):
    """
    Raised when the file contains no timesheet entries.
    """


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TimesheetUploadService:
    """
    Runs the metadata, parse, validate and import stages for one file.
    """

    def __init__(
        self,
        *,
        import_service: TimesheetImportService,
        parser: TimesheetParser | None = None,
        max_validation_errors: int = 100,
        max_reported_validation_errors: int = 10,
        max_file_size_bytes: int | None = None,
    ) -> None:
        self._import_service = import_service
        self._parser = parser or TimesheetParser()
        self._max_validation_errors = max(1, max_validation_errors)
        self._max_reported_validation_errors = max(1, max_reported_validation_errors)
        self._max_file_size_bytes = max_file_size_bytes

    def upload(
        self,
        data: bytes,
        *,
        filename: str,
        uploaded_by_email: str,
        uploaded_by_name: str | None = None,
        manual_overrides: Mapping[str, str] | None = None,
    ) -> UploadBatch:
        metadata = self._validate_metadata(
            filename=filename,
            file_size=len(data),
            uploaded_by_email=uploaded_by_email,
            uploaded_by_name=uploaded_by_name,
        )
        batch_meta = metadata.to_batch_meta()

        result = self._parser.parse_file(
            data,
            file_type=batch_meta.file_type,
            manual_overrides=manual_overrides,
        )

        if result.errors:
            log_event(
                logger,
                logging.WARNING,
                "timesheet_upload_rejected",
                filename=batch_meta.filename,
                total_rows=result.total_rows,
                total_errors=len(result.errors),
            )
            raise TimesheetValidationFailedError(
                errors=result.errors[: self._max_validation_errors],
                total_errors=len(result.errors),
                total_rows=result.total_rows,
                valid_rows=result.valid_rows,
                max_reported_errors=self._max_reported_validation_errors,
            )

        if not result.entries:
            raise EmptyTimesheetError("The file is empty or contains no valid timesheet entries.")

        logger.info(
            "Parsed %d valid rows from %d total rows in %s",
            result.valid_rows,
            result.total_rows,
            batch_meta.filename,
        )
        return self._import_service.import_entries(
            result.entries,
            batch_meta,
            row_numbers=result.entry_rows,
        )

    def _validate_metadata(
        self,
        *,
        filename: str,
        file_size: int,
        uploaded_by_email: str,
        uploaded_by_name: str | None,
    ) -> UploadMetadata:
        payload: dict[str, object] = {
            "filename": filename,
            "file_size": file_size,
            "uploaded_by_email": uploaded_by_email,
            "uploaded_by_name": uploaded_by_name,
        }
        if self._max_file_size_bytes is not None:
            payload["max_file_size_bytes"] = self._max_file_size_bytes
        try:
            return UploadMetadata.model_validate(payload)
        except ValidationError as exc:
            messages = "; ".join(error["msg"] for error in exc.errors())
            raise TimesheetStructureError(f"Invalid upload: {messages}") from exc


def build_timesheet_upload_service(db: Session) -> TimesheetUploadService:
    """
    Build an upload service wired to the SQLAlchemy repositories of ``db``.
    """

    settings = get_timesheet_import_settings()
    import_service = TimesheetImportService(
        entry_store=TimesheetEntryRepository(db),
        upload_store=UploadHistoryRepository(db),
        batch_size=settings.batch_size,
        max_validation_errors=settings.max_validation_errors,
    )
    return TimesheetUploadService(
        import_service=import_service,
        parser=TimesheetParser(
            log_validation_errors=settings.log_validation_errors,
            max_logged_errors=settings.max_validation_errors,
        ),
        max_validation_errors=settings.max_validation_errors,
        max_reported_validation_errors=settings.max_reported_validation_errors,
        max_file_size_bytes=settings.max_file_size_bytes,
    )
