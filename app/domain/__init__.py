"""
app/domain package marker.
"""

from app.domain.natural_key import NaturalKey
from app.domain.stores import (
    EntryStore,
    EntryStoreError,
    HolidaySource,
    PlannedFTEConflictError,
    UploadBatchStore,
    UploadHistoryError,
)
from app.domain.timesheet import (
    CanonicalEntry,
    EntryFilter,
    ParseResult,
    RowValidationError,
    StoredEntry,
)
from app.domain.upload import (
    FileType,
    InsertOutcome,
    RowOutcome,
    RowOutcomeKind,
    SkipReason,
    UploadBatch,
    UploadBatchMeta,
    UploadBatchSummary,
    UploadStatus,
)

__all__ = [
    "CanonicalEntry",
    "EntryFilter",
    "EntryStore",
    "EntryStoreError",
    "FileType",
    "HolidaySource",
    "InsertOutcome",
    "NaturalKey",
    "ParseResult",
    "PlannedFTEConflictError",
    "RowOutcome",
    "RowOutcomeKind",
    "RowValidationError",
    "SkipReason",
    "StoredEntry",
    "UploadBatch",
    "UploadBatchMeta",
    "UploadBatchStore",
    "UploadBatchSummary",
    "UploadHistoryError",
    "UploadStatus",
]
