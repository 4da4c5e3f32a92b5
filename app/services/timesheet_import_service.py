"""
app/services/timesheet_import_service.py

Idempotent batch import of validated timesheet entries.

Every row ends with exactly one tagged outcome (success, skipped or failed)
and the batch status is derived from the outcome counts:

* no failed rows               -> completed
* failed and successful rows   -> partial
* failed rows, none successful -> failed
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from app.domain.natural_key import NaturalKey
from app.domain.stores import EntryStore, EntryStoreError, UploadBatchStore
from app.domain.timesheet import CanonicalEntry, EntryFilter, RowValidationError
from app.domain.upload import (
    InsertOutcome,
    RowOutcome,
    RowOutcomeKind,
    SkipReason,
    UploadBatch,
    UploadBatchMeta,
    UploadBatchSummary,
    UploadStatus,
)
from app.logging_utils import log_event
from app.services.deduplication import partition_duplicates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _IndexedEntry:
    row_number: int
    entry: CanonicalEntry
    key: NaturalKey


@dataclass
class ImportAccumulator:
    """
    Collects per-row outcomes and derives batch-level counters from them.
    """

    outcomes: list[RowOutcome] = field(default_factory=list)
    imported_dates: list[date] = field(default_factory=list)

    def success(self, row_number: int, *, entry_id: str | None, entry_date: date) -> None:
        self.outcomes.append(
            RowOutcome(row_number=row_number, kind=RowOutcomeKind.SUCCESS, entry_id=entry_id)
        )
        self.imported_dates.append(entry_date)

    def skipped(self, row_number: int, *, reason: str) -> None:
        self.outcomes.append(RowOutcome(row_number=row_number, kind=RowOutcomeKind.SKIPPED, reason=reason))

    def failed(self, row_number: int, *, message: str) -> None:
        self.outcomes.append(RowOutcome(row_number=row_number, kind=RowOutcomeKind.FAILED, message=message))

    def fail_unresolved(self, *, indexed_rows: Sequence[int], message: str) -> None:
        """Mark every row without an outcome yet as failed."""
        resolved = Counter(outcome.row_number for outcome in self.outcomes)
        for row_number in indexed_rows:
            if resolved[row_number] > 0:
                resolved[row_number] -= 1
                continue
            self.failed(row_number, message=message)

    @property
    def kind_counts(self) -> Counter[str]:
        return Counter(outcome.kind for outcome in self.outcomes)

    @property
    def reason_counts(self) -> Counter[str]:
        return Counter(outcome.reason for outcome in self.outcomes if outcome.reason)

    def status(self) -> str:
        counts = self.kind_counts
        failed = counts[RowOutcomeKind.FAILED]
        if failed == 0:
            return UploadStatus.COMPLETED
        if counts[RowOutcomeKind.SUCCESS] > 0:
            return UploadStatus.PARTIAL
        return UploadStatus.FAILED

    def summarize(self, *, max_errors: int) -> UploadBatchSummary:
        counts = self.kind_counts
        reasons = self.reason_counts
        failures = sorted(
            (outcome for outcome in self.outcomes if outcome.kind == RowOutcomeKind.FAILED),
            key=lambda outcome: outcome.row_number,
        )
        total = len(self.outcomes)
        error_message = None
        if failures:
            error_message = f"{len(failures)} of {total} rows could not be stored."

        return UploadBatchSummary(
            total_rows=total,
            successful_rows=counts[RowOutcomeKind.SUCCESS],
            failed_rows=counts[RowOutcomeKind.FAILED],
            skipped_rows=counts[RowOutcomeKind.SKIPPED],
            duplicate_in_batch_rows=reasons[SkipReason.DUPLICATE_IN_BATCH],
            duplicate_existing_rows=(
                reasons[SkipReason.DUPLICATE_EXISTING] + reasons[SkipReason.CONFLICT_ON_WRITE]
            ),
            status=self.status(),
            data_date_from=min(self.imported_dates) if self.imported_dates else None,
            data_date_to=max(self.imported_dates) if self.imported_dates else None,
            error_message=error_message,
            validation_errors=[
                RowValidationError(row_number=outcome.row_number, message=outcome.message or "Insert failed.")
                for outcome in failures[:max_errors]
            ],
        )


class TimesheetImportService:
    """
    Deduplicates canonical entries and appends the new ones to the entry store.
    """

    def __init__(
        self,
        *,
        entry_store: EntryStore,
        upload_store: UploadBatchStore,
        batch_size: int = 1000,
        max_validation_errors: int = 100,
    ) -> None:
        self._entry_store = entry_store
        self._upload_store = upload_store
        self._batch_size = max(1, batch_size)
        self._max_validation_errors = max(1, max_validation_errors)

    def import_entries(
        self,
        entries: Sequence[CanonicalEntry],
        meta: UploadBatchMeta,
        *,
        row_numbers: Sequence[int] | None = None,
    ) -> UploadBatch:
        """
        Import entries and return the completed upload batch record.

        ``row_numbers`` are the source row positions of ``entries``; they
        default to ``1..n`` and decide which in-batch duplicate is kept.
        """

        if row_numbers is None:
            row_numbers = range(1, len(entries) + 1)
        if len(row_numbers) != len(entries):
            raise ValueError("row_numbers must have one position per entry.")

        batch = self._upload_store.create_batch(meta, total_rows=len(entries))
        log_event(
            logger,
            logging.INFO,
            "timesheet_import_started",
            upload_id=batch.id,
            filename=meta.filename,
            total_rows=len(entries),
        )

        accumulator = ImportAccumulator()
        indexed = [
            _IndexedEntry(row_number=row_number, entry=entry, key=NaturalKey.of(entry))
            for row_number, entry in zip(row_numbers, entries)
        ]

        try:
            self._import_rows(indexed, upload_id=batch.id, accumulator=accumulator)
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "timesheet_import_aborted",
                upload_id=batch.id,
                error=str(exc),
                exc_info=True,
            )
            accumulator.fail_unresolved(
                indexed_rows=[item.row_number for item in indexed],
                message=f"Import aborted: {exc}",
            )
            self._upload_store.complete_batch(
                batch.id,
                accumulator.summarize(max_errors=self._max_validation_errors),
            )
            raise

        summary = accumulator.summarize(max_errors=self._max_validation_errors)
        completed = self._upload_store.complete_batch(batch.id, summary)
        log_event(
            logger,
            logging.INFO,
            "timesheet_import_completed",
            upload_id=batch.id,
            status=summary.status,
            total_rows=summary.total_rows,
            successful_rows=summary.successful_rows,
            skipped_rows=summary.skipped_rows,
            failed_rows=summary.failed_rows,
            duplicate_in_batch_rows=summary.duplicate_in_batch_rows,
            duplicate_existing_rows=summary.duplicate_existing_rows,
        )
        return completed

    def _import_rows(
        self,
        indexed: Sequence[_IndexedEntry],
        *,
        upload_id: str,
        accumulator: ImportAccumulator,
    ) -> None:
        partition = partition_duplicates(
            indexed,
            key_fn=lambda item: item.key,
            sort_key=lambda item: item.row_number,
        )
        for item in partition.dropped:
            accumulator.skipped(item.row_number, reason=SkipReason.DUPLICATE_IN_BATCH)

        try:
            existing_keys = self._existing_keys(partition.kept)
        except EntryStoreError as exc:
            log_event(
                logger,
                logging.ERROR,
                "timesheet_import_lookup_failed",
                upload_id=upload_id,
                rows=len(partition.kept),
                error=str(exc),
            )
            for item in partition.kept:
                accumulator.failed(item.row_number, message=f"Existing entry lookup failed: {exc}")
            return

        candidates: list[_IndexedEntry] = []
        for item in partition.kept:
            if item.key in existing_keys:
                accumulator.skipped(item.row_number, reason=SkipReason.DUPLICATE_EXISTING)
            else:
                candidates.append(item)

        for start in range(0, len(candidates), self._batch_size):
            self._persist_chunk(
                chunk=candidates[start : start + self._batch_size],
                upload_id=upload_id,
                accumulator=accumulator,
            )

    def _existing_keys(self, items: Sequence[_IndexedEntry]) -> set[NaturalKey]:
        if not items:
            return set()
        dates = [item.entry.date for item in items]
        stored = self._entry_store.list_entries(EntryFilter(date_from=min(dates), date_to=max(dates)))
        return {NaturalKey.of(entry) for entry in stored}

    def _persist_chunk(
        self,
        *,
        chunk: Sequence[_IndexedEntry],
        upload_id: str,
        accumulator: ImportAccumulator,
    ) -> None:
        try:
            outcomes = self._entry_store.insert_entries(
                [item.entry for item in chunk],
                upload_id=upload_id,
                row_numbers=[item.row_number for item in chunk],
            )
        except EntryStoreError as exc:
            log_event(
                logger,
                logging.ERROR,
                "timesheet_import_chunk_failed",
                upload_id=upload_id,
                first_row=chunk[0].row_number,
                rows=len(chunk),
                error=str(exc),
            )
            for item in chunk:
                accumulator.failed(item.row_number, message=f"Insert failed: {exc}")
            return

        for position, item in enumerate(chunk):
            outcome = outcomes[position] if position < len(outcomes) else InsertOutcome(
                error="Entry store returned no outcome for this row."
            )
            if outcome.conflict:
                accumulator.skipped(item.row_number, reason=SkipReason.CONFLICT_ON_WRITE)
            elif outcome.inserted:
                accumulator.success(item.row_number, entry_id=outcome.entry_id, entry_date=item.entry.date)
            else:
                accumulator.failed(item.row_number, message=outcome.error or "Insert failed.")
