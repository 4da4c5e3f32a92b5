"""
app/repositories/upload_history_repository.py

Persistence of upload batch records.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Select, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.stores import UploadHistoryError
from app.domain.timesheet import RowValidationError
from app.domain.upload import UploadBatch, UploadBatchMeta, UploadBatchSummary, UploadStatus
from db.models.upload_history import UploadHistory


class UploadHistoryRepository:
    def __init__(self, session: Session, *, commit: bool = True) -> None:
        self._session = session
        self._commit = commit

    def create_batch(self, meta: UploadBatchMeta, *, total_rows: int) -> UploadBatch:
        record = UploadHistory(
            filename=meta.filename,
            file_size=meta.file_size,
            file_type=meta.file_type,
            uploaded_by_email=meta.uploaded_by_email,
            uploaded_by_name=meta.uploaded_by_name,
            total_rows=total_rows,
            successful_rows=0,
            failed_rows=0,
            skipped_rows=0,
            status=UploadStatus.PROCESSING,
        )
        try:
            self._session.add(record)
            self._session.flush()
            self._commit_if_enabled()
            self._session.refresh(record)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise UploadHistoryError(f"Failed to create upload history for {meta.filename!r}.") from exc
        return _to_domain(record)

    def complete_batch(self, batch_id: str, summary: UploadBatchSummary) -> UploadBatch:
        record = self._get_record(batch_id)
        record.total_rows = summary.total_rows
        record.successful_rows = summary.successful_rows
        record.failed_rows = summary.failed_rows
        record.skipped_rows = summary.skipped_rows
        record.duplicate_in_batch_rows = summary.duplicate_in_batch_rows
        record.duplicate_existing_rows = summary.duplicate_existing_rows
        record.status = summary.status
        record.data_date_from = summary.data_date_from
        record.data_date_to = summary.data_date_to
        record.error_message = summary.error_message
        record.validation_errors = [_error_to_json(error) for error in summary.validation_errors] or None
        record.completed_at = datetime.now(timezone.utc)
        try:
            self._session.flush()
            self._commit_if_enabled()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise UploadHistoryError(f"Failed to complete upload batch {batch_id}.") from exc
        return _to_domain(record)

    def get_batch(self, batch_id: str) -> UploadBatch | None:
        record = self._session.get(UploadHistory, _parse_id(batch_id))
        return _to_domain(record) if record is not None else None

    def list_recent(self, *, limit: int = 10) -> list[UploadBatch]:
        stmt: Select[tuple[UploadHistory]] = (
            select(UploadHistory).order_by(UploadHistory.created_at.desc()).limit(max(1, limit))
        )
        return [_to_domain(record) for record in self._session.scalars(stmt).all()]

    def delete_batch(self, batch_id: str) -> None:
        """
        Delete a batch; its entries go with it through the ON DELETE CASCADE key.
        """

        try:
            result = self._session.execute(delete(UploadHistory).where(UploadHistory.id == _parse_id(batch_id)))
            if not result.rowcount:
                raise UploadHistoryError(f"Upload batch {batch_id} not found.")
            self._commit_if_enabled()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise UploadHistoryError(f"Failed to delete upload batch {batch_id}.") from exc

    def _get_record(self, batch_id: str) -> UploadHistory:
        record = self._session.get(UploadHistory, _parse_id(batch_id))
        if record is None:
            raise UploadHistoryError(f"Upload batch {batch_id} not found.")
        return record

    def _commit_if_enabled(self) -> None:
        if self._commit:
            self._session.commit()


def _parse_id(batch_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(batch_id))
    except ValueError as exc:
        raise UploadHistoryError(f"Invalid upload batch id {batch_id!r}.") from exc


def _error_to_json(error: RowValidationError) -> dict[str, Any]:
    return {
        "row_number": error.row_number,
        "column": error.column,
        "message": error.message,
        "value": error.value,
    }


def _error_from_json(payload: dict[str, Any]) -> RowValidationError:
    return RowValidationError(
        row_number=int(payload.get("row_number") or 0),
        column=payload.get("column"),
        message=str(payload.get("message") or ""),
        value=payload.get("value"),
    )


def _to_domain(record: UploadHistory) -> UploadBatch:
    return UploadBatch(
        id=str(record.id),
        filename=record.filename,
        file_size=record.file_size,
        file_type=record.file_type,
        uploaded_by_email=record.uploaded_by_email,
        uploaded_by_name=record.uploaded_by_name,
        total_rows=record.total_rows,
        successful_rows=record.successful_rows,
        failed_rows=record.failed_rows,
        skipped_rows=record.skipped_rows,
        status=record.status,
        duplicate_in_batch_rows=record.duplicate_in_batch_rows,
        duplicate_existing_rows=record.duplicate_existing_rows,
        data_date_from=record.data_date_from,
        data_date_to=record.data_date_to,
        error_message=record.error_message,
        validation_errors=[_error_from_json(item) for item in record.validation_errors or []],
        created_at=record.created_at,
        completed_at=record.completed_at,
    )
