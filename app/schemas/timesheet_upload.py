"""
app/schemas/timesheet_upload.py

Upload metadata validation and response schemas for timesheet imports.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import PurePath

from pydantic import BaseModel, Field, field_validator, model_validator

from app.config import DEFAULT_MAX_FILE_SIZE_BYTES
from app.domain.timesheet import RowValidationError
from app.domain.upload import FileType, UploadBatch, UploadBatchMeta

ALLOWED_EXTENSIONS: dict[str, str] = {
    ".csv": FileType.CSV,
    ".xlsx": FileType.XLSX,
    ".xls": FileType.XLS,
}


def infer_file_type(filename: str) -> str:
    """
    Map a filename extension to its file type, or raise ValueError.
    """

    suffix = PurePath(filename or "").suffix.lower()
    file_type = ALLOWED_EXTENSIONS.get(suffix)
    if file_type is None:
        allowed = ", ".join(sorted(ALLOWED_EXTENSIONS))
        raise ValueError(f"Unsupported file extension {suffix or '(none)'!r}. Allowed: {allowed}.")
    return file_type


class UploadMetadata(BaseModel):
    """
    Validated metadata of one uploaded timesheet file.
    """

    filename: str = Field(..., min_length=1)
    file_size: int = Field(..., ge=0)
    uploaded_by_email: str = Field(..., min_length=1)
    uploaded_by_name: str | None = None
    max_file_size_bytes: int = Field(default=DEFAULT_MAX_FILE_SIZE_BYTES, gt=0, exclude=True)
    file_type: str | None = None

    @field_validator("filename", "uploaded_by_email")
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @model_validator(mode="after")
    def check_file(self) -> "UploadMetadata":
        if self.file_size > self.max_file_size_bytes:
            limit_mib = self.max_file_size_bytes / (1024 * 1024)
            raise ValueError(f"File too large. Maximum size is {limit_mib:g} MiB.")
        inferred = infer_file_type(self.filename)
        if self.file_type is not None and self.file_type.lower().lstrip(".") != inferred:
            raise ValueError(f"file_type {self.file_type!r} does not match extension of {self.filename!r}.")
        self.file_type = inferred
        return self

    def to_batch_meta(self) -> UploadBatchMeta:
        return UploadBatchMeta(
            filename=self.filename,
            file_size=self.file_size,
            file_type=self.file_type or infer_file_type(self.filename),
            uploaded_by_email=self.uploaded_by_email,
            uploaded_by_name=self.uploaded_by_name,
        )


class RowValidationErrorResponse(BaseModel):
    """
    Response model for one row-level validation error.
    """

    row_number: int = Field(..., ge=0)
    message: str
    column: str | None = None
    value: str | None = None

    @classmethod
    def from_domain(cls, error: RowValidationError) -> "RowValidationErrorResponse":
        return cls(
            row_number=error.row_number,
            message=error.message,
            column=error.column,
            value=error.value,
        )


class UploadBatchResponse(BaseModel):
    """
    Response model for one upload history record.
    """

    id: str
    filename: str
    file_size: int = Field(..., ge=0)
    file_type: str
    uploaded_by_email: str
    uploaded_by_name: str | None = None
    status: str
    total_rows: int = Field(..., ge=0)
    successful_rows: int = Field(..., ge=0)
    failed_rows: int = Field(..., ge=0)
    skipped_rows: int = Field(..., ge=0)
    duplicate_in_batch_rows: int = Field(default=0, ge=0)
    duplicate_existing_rows: int = Field(default=0, ge=0)
    data_date_from: date | None = None
    data_date_to: date | None = None
    error_message: str | None = None
    validation_errors: list[RowValidationErrorResponse] = Field(default_factory=list)
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_domain(cls, batch: UploadBatch) -> "UploadBatchResponse":
        return cls(
            id=batch.id,
            filename=batch.filename,
            file_size=batch.file_size,
            file_type=batch.file_type,
            uploaded_by_email=batch.uploaded_by_email,
            uploaded_by_name=batch.uploaded_by_name,
            status=batch.status,
            total_rows=batch.total_rows,
            successful_rows=batch.successful_rows,
            failed_rows=batch.failed_rows,
            skipped_rows=batch.skipped_rows,
            duplicate_in_batch_rows=batch.duplicate_in_batch_rows,
            duplicate_existing_rows=batch.duplicate_existing_rows,
            data_date_from=batch.data_date_from,
            data_date_to=batch.data_date_to,
            error_message=batch.error_message,
            validation_errors=[RowValidationErrorResponse.from_domain(error) for error in batch.validation_errors],
            created_at=batch.created_at,
            completed_at=batch.completed_at,
        )


class ValidationRejectionResponse(BaseModel):
    """
    Response model for a submission rejected before import.
    """

    message: str
    total_rows: int = Field(..., ge=0)
    valid_rows: int = Field(..., ge=0)
    total_errors: int = Field(..., ge=0)
    validation_errors: list[RowValidationErrorResponse] = Field(default_factory=list)
