"""
app/services/deduplication.py

Natural-key duplicate resolution shared by live import and store cleanup.

Both paths call ``partition_duplicates`` with the same grouping key and only
differ in the ordering used to pick the survivor of each group: import order
for rows of one upload, ``(created_at, source_row, id)`` for stored entries.
Stored entries of one upload share a creation timestamp, so the source row
breaks the tie exactly like the import-time rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Generic, Hashable, Iterable, TypeVar

from app.domain.natural_key import NaturalKey
from app.domain.stores import EntryStore
from app.domain.timesheet import StoredEntry
from app.logging_utils import log_event

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_CLEANUP_EXAMPLES = 5


@dataclass(frozen=True)
class DuplicateGroup(Generic[T]):
    """
    Items sharing one natural key; ``survivor`` is the one that is kept.
    """

    key: Hashable
    survivor: T
    duplicates: tuple[T, ...]

    @property
    def size(self) -> int:
        return 1 + len(self.duplicates)


@dataclass(frozen=True)
class DuplicatePartition(Generic[T]):
    kept: list[T]
    groups: list[DuplicateGroup[T]] = field(default_factory=list)

    @property
    def dropped(self) -> list[T]:
        return [item for group in self.groups for item in group.duplicates]


def partition_duplicates(
    items: Iterable[T],
    *,
    key_fn: Callable[[T], Hashable],
    sort_key: Callable[[T], Any],
) -> DuplicatePartition[T]:
    """
    Keep the first item of every key group according to ``sort_key``.

    ``kept`` is returned ordered by ``sort_key``; only groups with more than
    one member are reported in ``groups``.
    """

    buckets: dict[Hashable, list[T]] = {}
    for item in items:
        buckets.setdefault(key_fn(item), []).append(item)

    kept: list[T] = []
    groups: list[DuplicateGroup[T]] = []
    for key, members in buckets.items():
        ordered = sorted(members, key=sort_key)
        kept.append(ordered[0])
        if len(ordered) > 1:
            groups.append(DuplicateGroup(key=key, survivor=ordered[0], duplicates=tuple(ordered[1:])))

    kept.sort(key=sort_key)
    groups.sort(key=lambda group: sort_key(group.survivor))
    return DuplicatePartition(kept=kept, groups=groups)


def stored_entry_age_key(entry: StoredEntry) -> tuple[bool, datetime, int, str]:
    """
    Oldest-first ordering for stored entries; missing timestamps sort last.
    """

    created_at = entry.created_at
    return (
        created_at is None,
        created_at if created_at is not None else datetime.min,
        entry.source_row if entry.source_row is not None else 0,
        entry.id,
    )


# ---------------------------------------------------------------------------
# Store cleanup
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DuplicateExample:
    person: str
    date: str
    project: str
    activity: str
    description: str | None
    duplicate_count: int


@dataclass(frozen=True)
class CleanupReport:
    """
    Result of one duplicate cleanup pass over the entry store.
    """

    scanned_entries: int
    duplicate_groups_found: int
    entries_deleted: int
    examples: list[DuplicateExample]
    dry_run: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "scanned_entries": self.scanned_entries,
            "duplicate_groups_found": self.duplicate_groups_found,
            "entries_deleted": self.entries_deleted,
            "dry_run": self.dry_run,
            "duplicate_examples": [
                {
                    "person": example.person,
                    "date": example.date,
                    "project": example.project,
                    "activity": example.activity,
                    "description": example.description,
                    "duplicate_count": example.duplicate_count,
                }
                for example in self.examples
            ],
        }


class DuplicateCleanupService:
    """
    Deletes every stored entry except the oldest one of its natural-key group.
    """

    def __init__(self, *, entry_store: EntryStore) -> None:
        self._entry_store = entry_store

    def cleanup(self, *, dry_run: bool = False) -> CleanupReport:
        entries = self._entry_store.list_entries()
        partition = partition_duplicates(entries, key_fn=NaturalKey.of, sort_key=stored_entry_age_key)
        doomed_ids = [entry.id for entry in partition.dropped]

        deleted = 0
        if doomed_ids and not dry_run:
            deleted = self._entry_store.delete_by_ids(doomed_ids)

        report = CleanupReport(
            scanned_entries=len(entries),
            duplicate_groups_found=len(partition.groups),
            entries_deleted=deleted,
            examples=[
                DuplicateExample(
                    person=group.survivor.person_name,
                    date=group.survivor.date.isoformat(),
                    project=group.survivor.project_name,
                    activity=group.survivor.activity_name,
                    description=group.survivor.description,
                    duplicate_count=group.size,
                )
                for group in partition.groups[:MAX_CLEANUP_EXAMPLES]
            ],
            dry_run=dry_run,
        )
        log_event(
            logger,
            logging.INFO,
            "duplicate_cleanup_completed",
            scanned_entries=report.scanned_entries,
            duplicate_groups_found=report.duplicate_groups_found,
            entries_deleted=report.entries_deleted,
            dry_run=dry_run,
        )
        return report
