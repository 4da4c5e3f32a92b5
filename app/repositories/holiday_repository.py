"""
app/repositories/holiday_repository.py

Public holiday lookup backing the business-day calendar.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import Select, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.stores import EntryStoreError
from app.logging_utils import log_event
from app.services.working_days import DEFAULT_COUNTRY_CODE, HolidayCalendar
from db.models.public_holiday import COUNTRY_DATE_CONSTRAINT, PublicHoliday

logger = logging.getLogger(__name__)


class HolidayRepository:
    def __init__(
        self,
        session: Session,
        *,
        country_code: str = DEFAULT_COUNTRY_CODE,
        commit: bool = True,
    ) -> None:
        self._session = session
        self._country_code = country_code
        self._commit = commit

    def list_holidays(self, date_from: date, date_to: date) -> dict[date, str]:
        stmt: Select[tuple[PublicHoliday]] = (
            select(PublicHoliday)
            .where(PublicHoliday.country_code == self._country_code)
            .where(PublicHoliday.holiday_date >= date_from)
            .where(PublicHoliday.holiday_date <= date_to)
            .order_by(PublicHoliday.holiday_date.asc())
        )
        try:
            return {record.holiday_date: record.name for record in self._session.scalars(stmt).all()}
        except SQLAlchemyError as exc:
            raise EntryStoreError("Failed to load public holidays.") from exc

    def load_calendar(self, date_from: date, date_to: date) -> HolidayCalendar:
        return HolidayCalendar.of(self.list_holidays(date_from, date_to))

    def save_calendar(self, calendar: HolidayCalendar) -> int:
        """
        Insert or rename the calendar's holidays for this repository's country.
        """

        rows = [
            {"country_code": self._country_code, "holiday_date": day, "name": name}
            for day, name in sorted(calendar.holidays.items())
        ]
        if not rows:
            return 0

        stmt = insert(PublicHoliday).values(rows)
        stmt = stmt.on_conflict_do_update(
            constraint=COUNTRY_DATE_CONSTRAINT,
            set_={"name": stmt.excluded.name},
        )
        try:
            self._session.execute(stmt)
            if self._commit:
                self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise EntryStoreError(f"Failed to store public holidays for {self._country_code}.") from exc

        log_event(
            logger,
            logging.INFO,
            "public_holidays_saved",
            country_code=self._country_code,
            holidays=len(rows),
            date_from=rows[0]["holiday_date"],
            date_to=rows[-1]["holiday_date"],
        )
        return len(rows)
