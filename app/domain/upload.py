"""
app/domain/upload.py

Upload batch bookkeeping types for the timesheet import flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from app.domain.timesheet import RowValidationError


class UploadStatus:
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL = "partial"


class FileType:
    CSV = "csv"
    XLSX = "xlsx"
    XLS = "xls"


class RowOutcomeKind:
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason:
    DUPLICATE_IN_BATCH = "duplicate_in_batch"
    DUPLICATE_EXISTING = "duplicate_existing"
    CONFLICT_ON_WRITE = "conflict_on_write"


@dataclass(frozen=True)
class UploadBatchMeta:
    """
    Caller-supplied metadata describing one uploaded file.
    """

    filename: str
    file_size: int
    file_type: str
    uploaded_by_email: str
    uploaded_by_name: str | None = None


@dataclass(frozen=True)
class RowOutcome:
    """
    Tagged result of importing one canonical row.
    """

    row_number: int
    kind: str
    reason: str | None = None
    message: str | None = None
    entry_id: str | None = None


@dataclass(frozen=True)
class InsertOutcome:
    """
    Per-row result reported by the entry store for one insert attempt.

    ``conflict`` is set when the store's natural-key constraint rejected the
    row because an identical entry was written concurrently.
    """

    entry_id: str | None = None
    conflict: bool = False
    error: str | None = None

    @property
    def inserted(self) -> bool:
        return self.entry_id is not None and not self.conflict and self.error is None


@dataclass(frozen=True)
class UploadBatch:
    """
    Upload history record produced by one import call.
    """

    id: str
    filename: str
    file_size: int
    file_type: str
    uploaded_by_email: str
    uploaded_by_name: str | None
    total_rows: int
    successful_rows: int
    failed_rows: int
    skipped_rows: int
    status: str
    duplicate_in_batch_rows: int = 0
    duplicate_existing_rows: int = 0
    data_date_from: date | None = None
    data_date_to: date | None = None
    error_message: str | None = None
    validation_errors: list[RowValidationError] = field(default_factory=list)
    created_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class UploadBatchSummary:
    """
    Final counters written onto an upload batch when the import finishes.
    """

    total_rows: int
    successful_rows: int
    failed_rows: int
    skipped_rows: int
    duplicate_in_batch_rows: int
    duplicate_existing_rows: int
    status: str
    data_date_from: date | None
    data_date_to: date | None
    error_message: str | None
    validation_errors: list[RowValidationError]
