"""
app/domain/stores.py

Storage contracts the import and analytics services depend on.

The services only talk to these protocols; ``app/repositories`` provides the
SQLAlchemy implementations and the tests provide in-memory ones.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from app.domain.timesheet import CanonicalEntry, EntryFilter, StoredEntry
from app.domain.upload import InsertOutcome, UploadBatch, UploadBatchMeta, UploadBatchSummary


class EntryStoreError(RuntimeError):
    """
    Raised when the entry store cannot complete a read or write.
    """


class UploadHistoryError(EntryStoreError):
    """
    Raised when an upload batch record cannot be created, updated or found.
    """


class PlannedFTEConflictError(EntryStoreError):
    """
    Raised when a planned FTE record would duplicate an existing valid_from.
    """


class EntryStore(Protocol):
    def list_entries(self, entry_filter: EntryFilter | None = None) -> list[StoredEntry]:
        ...

    def insert_entries(
        self,
        entries: Sequence[CanonicalEntry],
        *,
        upload_id: str,
        row_numbers: Sequence[int] | None = None,
    ) -> list[InsertOutcome]:
        """
        Insert entries and return one outcome per input entry, in order.
        """
        ...

    def delete_by_ids(self, entry_ids: Sequence[str]) -> int:
        ...


class UploadBatchStore(Protocol):
    def create_batch(self, meta: UploadBatchMeta, *, total_rows: int) -> UploadBatch:
        ...

    def complete_batch(self, batch_id: str, summary: UploadBatchSummary) -> UploadBatch:
        ...


class HolidaySource(Protocol):
    def list_holidays(self, date_from: date, date_to: date) -> dict[date, str]:
        ...
