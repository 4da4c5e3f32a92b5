"""
app/repositories/planned_fte_repository.py

Persistence of effective-dated planned FTE targets.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.stores import EntryStoreError, PlannedFTEConflictError
from app.logging_utils import log_event
from app.services.fte_service import PlannedFTEHistory, PlannedFTERecord, TargetChange
from db.models.planned_fte import PlannedFTE

logger = logging.getLogger(__name__)


class PlannedFTERepository:
    def __init__(self, session: Session, *, commit: bool = True) -> None:
        self._session = session
        self._commit = commit

    def list_records(self, *, person_name: str | None = None) -> list[PlannedFTERecord]:
        stmt: Select[tuple[PlannedFTE]] = select(PlannedFTE)
        if person_name:
            stmt = stmt.where(PlannedFTE.person_name == person_name)
        stmt = stmt.order_by(PlannedFTE.person_name.asc(), PlannedFTE.valid_from.desc())
        try:
            return [_to_domain(record) for record in self._session.scalars(stmt).all()]
        except SQLAlchemyError as exc:
            raise EntryStoreError("Failed to load planned FTE records.") from exc

    def load_history(self) -> PlannedFTEHistory:
        return PlannedFTEHistory(self.list_records())

    def history(self, person_name: str) -> list[PlannedFTERecord]:
        """
        All records of one person, newest ``valid_from`` first.
        """

        return self.list_records(person_name=person_name)

    def record_target(self, *, person_name: str, fte_value: float, valid_from: date) -> TargetChange:
        """
        Store a new target and close the person's open record the day before it.
        """

        current = PlannedFTEHistory(self.list_records(person_name=person_name))
        change = current.with_new_target(person_name, fte_value, valid_from)

        try:
            if change.closed_record is not None and change.closed_record.id is not None:
                closed = self._session.get(PlannedFTE, uuid.UUID(change.closed_record.id))
                if closed is not None:
                    closed.valid_to = change.closed_record.valid_to
            record = PlannedFTE(
                person_name=change.new_record.person_name,
                fte_value=change.new_record.fte_value,
                valid_from=change.new_record.valid_from,
                valid_to=None,
            )
            self._session.add(record)
            self._session.flush()
            if self._commit:
                self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise PlannedFTEConflictError(
                f"Planned FTE for {person_name!r} from {valid_from.isoformat()} already exists."
            ) from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise EntryStoreError(f"Failed to store planned FTE for {person_name!r}.") from exc

        log_event(
            logger,
            logging.INFO,
            "planned_fte_recorded",
            person_name=person_name,
            fte_value=change.new_record.fte_value,
            valid_from=valid_from.isoformat(),
            closed_previous=change.closed_record is not None,
        )
        return TargetChange(
            history=change.history,
            new_record=_to_domain(record),
            closed_record=change.closed_record,
        )


def _to_domain(record: PlannedFTE) -> PlannedFTERecord:
    return PlannedFTERecord(
        id=str(record.id),
        person_name=record.person_name,
        person_id=record.person_id,
        fte_value=float(record.fte_value),
        valid_from=record.valid_from,
        valid_to=record.valid_to,
        created_at=record.created_at,
    )
