"""
app/repositories/timesheet_entry_repository.py

SQLAlchemy entry store for timesheet entries.

Inserts go through ``INSERT .. ON CONFLICT DO NOTHING RETURNING`` on the
natural-key unique constraint, so a row written concurrently by another
import is reported as a conflict instead of being stored twice. Each chunk
runs in a savepoint; when the chunk fails as a whole the rows are retried
one by one so a single bad row cannot take its neighbours down.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import Select, delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.natural_key import NaturalKey
from app.domain.stores import EntryStoreError
from app.domain.timesheet import CanonicalEntry, EntryFilter, StoredEntry
from app.domain.upload import InsertOutcome
from app.services.project_categories import map_project_category
from db.models.timesheet_entry import NATURAL_KEY_CONSTRAINT, TimesheetEntry

logger = logging.getLogger(__name__)

_DELETE_CHUNK_SIZE = 1000


class TimesheetEntryRepository:
    """
    Entry store backed by the ``timesheet_entries`` table.
    """

    def __init__(self, session: Session, *, commit: bool = True) -> None:
        self._session = session
        self._commit = commit

    def list_entries(self, entry_filter: EntryFilter | None = None) -> list[StoredEntry]:
        stmt: Select[tuple[TimesheetEntry]] = select(TimesheetEntry)
        if entry_filter is not None:
            if entry_filter.date_from is not None:
                stmt = stmt.where(TimesheetEntry.date >= entry_filter.date_from)
            if entry_filter.date_to is not None:
                stmt = stmt.where(TimesheetEntry.date <= entry_filter.date_to)
            if entry_filter.person_name:
                stmt = stmt.where(TimesheetEntry.person_name == entry_filter.person_name)
            if entry_filter.upload_id:
                stmt = stmt.where(TimesheetEntry.upload_id == uuid.UUID(entry_filter.upload_id))
        stmt = stmt.order_by(TimesheetEntry.date.asc(), TimesheetEntry.created_at.asc())

        try:
            return [_to_domain(record) for record in self._session.scalars(stmt).all()]
        except SQLAlchemyError as exc:
            raise EntryStoreError("Failed to list timesheet entries.") from exc

    def insert_entries(
        self,
        entries: Sequence[CanonicalEntry],
        *,
        upload_id: str,
        row_numbers: Sequence[int] | None = None,
    ) -> list[InsertOutcome]:
        if not entries:
            return []

        positions = list(row_numbers) if row_numbers is not None else list(range(1, len(entries) + 1))
        payloads = [
            _to_payload(entry, upload_id=upload_id, source_row=row)
            for entry, row in zip(entries, positions)
        ]

        try:
            with self._session.begin_nested():
                inserted = self._insert_payloads(payloads)
            outcomes = _outcomes_for(payloads, inserted)
        except SQLAlchemyError as exc:
            logger.warning(
                "Chunk insert failed for upload %s (%d rows), retrying row by row: %s",
                upload_id,
                len(payloads),
                exc,
            )
            outcomes = [self._insert_single(payload) for payload in payloads]

        self._commit_if_enabled()
        return outcomes

    def delete_by_ids(self, entry_ids: Sequence[str]) -> int:
        if not entry_ids:
            return 0

        ids = [uuid.UUID(str(entry_id)) for entry_id in entry_ids]
        deleted = 0
        try:
            for start in range(0, len(ids), _DELETE_CHUNK_SIZE):
                chunk = ids[start : start + _DELETE_CHUNK_SIZE]
                result = self._session.execute(delete(TimesheetEntry).where(TimesheetEntry.id.in_(chunk)))
                deleted += result.rowcount or 0
            self._commit_if_enabled()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise EntryStoreError("Failed to delete timesheet entries.") from exc
        return deleted

    def _insert_payloads(self, payloads: Sequence[dict[str, Any]]) -> dict[str, uuid.UUID]:
        stmt = (
            insert(TimesheetEntry)
            .values(list(payloads))
            .on_conflict_do_nothing(constraint=NATURAL_KEY_CONSTRAINT)
            .returning(TimesheetEntry.id, TimesheetEntry.natural_key)
        )
        return {natural_key: entry_id for entry_id, natural_key in self._session.execute(stmt).all()}

    def _insert_single(self, payload: dict[str, Any]) -> InsertOutcome:
        try:
            with self._session.begin_nested():
                inserted = self._insert_payloads([payload])
        except SQLAlchemyError as exc:
            return InsertOutcome(error=f"{type(exc).__name__}: {exc}")
        return _outcomes_for([payload], inserted)[0]

    def _commit_if_enabled(self) -> None:
        if not self._commit:
            return
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise EntryStoreError("Failed to commit timesheet entries.") from exc


def _to_payload(entry: CanonicalEntry, *, upload_id: str, source_row: int | None) -> dict[str, Any]:
    return {
        "id": uuid.uuid4(),
        "person_id": entry.person_id,
        "person_name": entry.person_name,
        "person_email": entry.person_email,
        "project_id": entry.project_id,
        "project_name": entry.project_name,
        "project_category": map_project_category(entry.project_name),
        "activity_id": entry.activity_id,
        "activity_name": entry.activity_name,
        "date": entry.date,
        "hours": entry.hours,
        "description": entry.description,
        "approved": entry.approved,
        "billable": entry.billable,
        "natural_key": NaturalKey.of(entry).digest(),
        "upload_id": uuid.UUID(upload_id),
        "source_row": source_row,
    }


def _outcomes_for(payloads: Sequence[dict[str, Any]], inserted: dict[str, uuid.UUID]) -> list[InsertOutcome]:
    outcomes: list[InsertOutcome] = []
    claimed: set[str] = set()
    for payload in payloads:
        natural_key = payload["natural_key"]
        entry_id = inserted.get(natural_key)
        if entry_id is None or natural_key in claimed:
            outcomes.append(InsertOutcome(conflict=True))
            continue
        claimed.add(natural_key)
        outcomes.append(InsertOutcome(entry_id=str(entry_id)))
    return outcomes


def _to_domain(record: TimesheetEntry) -> StoredEntry:
    return StoredEntry(
        id=str(record.id),
        person_id=record.person_id,
        person_name=record.person_name,
        person_email=record.person_email,
        project_id=record.project_id,
        project_name=record.project_name,
        project_category=record.project_category,
        activity_id=record.activity_id,
        activity_name=record.activity_name,
        date=record.date,
        hours=float(record.hours),
        description=record.description,
        approved=record.approved,
        billable=record.billable,
        upload_id=str(record.upload_id) if record.upload_id is not None else None,
        source_row=record.source_row,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
