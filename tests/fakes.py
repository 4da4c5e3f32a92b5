"""
In-memory stores used by the service tests.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Sequence

from app.domain.natural_key import NaturalKey
from app.domain.stores import EntryStoreError, UploadHistoryError
from app.domain.timesheet import CanonicalEntry, EntryFilter, StoredEntry
from app.domain.upload import InsertOutcome, UploadBatch, UploadBatchMeta, UploadBatchSummary, UploadStatus
from app.services.project_categories import map_project_category

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_entry(
    *,
    person_name: str = "Jana",
    project_name: str = "OPS_2025",
    activity_name: str = "Hiring interviews",
    entry_date: date = date(2025, 11, 3),
    hours: float = 2.0,
    description: str | None = None,
    person_id: int = 1,
) -> CanonicalEntry:
    return CanonicalEntry(
        person_id=person_id,
        person_name=person_name,
        project_id=10,
        project_name=project_name,
        activity_id=100,
        activity_name=activity_name,
        date=entry_date,
        hours=hours,
        description=description,
    )


def stored_from(
    entry: CanonicalEntry,
    *,
    entry_id: str | None = None,
    created_at: datetime | None = None,
    source_row: int | None = None,
) -> StoredEntry:
    return StoredEntry(
        id=entry_id or str(uuid.uuid4()),
        person_id=entry.person_id,
        person_name=entry.person_name,
        project_id=entry.project_id,
        project_name=entry.project_name,
        activity_id=entry.activity_id,
        activity_name=entry.activity_name,
        date=entry.date,
        hours=entry.hours,
        description=entry.description,
        project_category=map_project_category(entry.project_name),
        source_row=source_row,
        created_at=created_at,
    )


class InMemoryEntryStore:
    """
    Entry store keeping rows in a list and enforcing natural-key uniqueness.

    ``before_insert`` runs right before each insert call, which lets a test
    write a competing row the way a concurrent import would. ``fail_rows``
    makes the listed source rows fail individually; ``fail_all`` makes the
    whole insert call raise.
    """

    def __init__(self, entries: Sequence[StoredEntry] = ()) -> None:
        self.entries: list[StoredEntry] = list(entries)
        self.before_insert: Callable[[], None] | None = None
        self.fail_rows: set[int] = set()
        self.fail_all = False
        self.insert_calls = 0
        self._clock = 0

    def list_entries(self, entry_filter: EntryFilter | None = None) -> list[StoredEntry]:
        selected = list(self.entries)
        if entry_filter is not None:
            if entry_filter.date_from is not None:
                selected = [entry for entry in selected if entry.date >= entry_filter.date_from]
            if entry_filter.date_to is not None:
                selected = [entry for entry in selected if entry.date <= entry_filter.date_to]
            if entry_filter.person_name:
                selected = [entry for entry in selected if entry.person_name == entry_filter.person_name]
            if entry_filter.upload_id:
                selected = [entry for entry in selected if entry.upload_id == entry_filter.upload_id]
        return selected

    def insert_entries(
        self,
        entries: Sequence[CanonicalEntry],
        *,
        upload_id: str,
        row_numbers: Sequence[int] | None = None,
    ) -> list[InsertOutcome]:
        self.insert_calls += 1
        if self.before_insert is not None:
            self.before_insert()
        if self.fail_all:
            raise EntryStoreError("database unavailable")

        rows = list(row_numbers) if row_numbers is not None else list(range(1, len(entries) + 1))
        existing = {NaturalKey.of(entry) for entry in self.entries}
        outcomes: list[InsertOutcome] = []
        for entry, row in zip(entries, rows):
            if row in self.fail_rows:
                outcomes.append(InsertOutcome(error=f"row {row} rejected"))
                continue
            key = NaturalKey.of(entry)
            if key in existing:
                outcomes.append(InsertOutcome(conflict=True))
                continue
            stored = replace(
                stored_from(entry, created_at=self._next_timestamp(), source_row=row),
                upload_id=upload_id,
            )
            self.entries.append(stored)
            existing.add(key)
            outcomes.append(InsertOutcome(entry_id=stored.id))
        return outcomes

    def delete_by_ids(self, entry_ids: Sequence[str]) -> int:
        doomed = set(entry_ids)
        before = len(self.entries)
        self.entries = [entry for entry in self.entries if entry.id not in doomed]
        return before - len(self.entries)

    def _next_timestamp(self) -> datetime:
        self._clock += 1
        return BASE_TIME + timedelta(seconds=self._clock)


class InMemoryUploadStore:
    def __init__(self) -> None:
        self.batches: dict[str, UploadBatch] = {}

    def create_batch(self, meta: UploadBatchMeta, *, total_rows: int) -> UploadBatch:
        batch = UploadBatch(
            id=str(uuid.uuid4()),
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
            created_at=BASE_TIME,
        )
        self.batches[batch.id] = batch
        return batch

    def complete_batch(self, batch_id: str, summary: UploadBatchSummary) -> UploadBatch:
        if batch_id not in self.batches:
            raise UploadHistoryError(f"Upload batch {batch_id} not found.")
        completed = replace(
            self.batches[batch_id],
            total_rows=summary.total_rows,
            successful_rows=summary.successful_rows,
            failed_rows=summary.failed_rows,
            skipped_rows=summary.skipped_rows,
            duplicate_in_batch_rows=summary.duplicate_in_batch_rows,
            duplicate_existing_rows=summary.duplicate_existing_rows,
            status=summary.status,
            data_date_from=summary.data_date_from,
            data_date_to=summary.data_date_to,
            error_message=summary.error_message,
            validation_errors=list(summary.validation_errors),
            completed_at=BASE_TIME,
        )
        self.batches[batch_id] = completed
        return completed
