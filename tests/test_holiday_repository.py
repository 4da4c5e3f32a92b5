from __future__ import annotations

import unittest
from datetime import date
from unittest.mock import MagicMock

from sqlalchemy import UniqueConstraint
from sqlalchemy.dialects import postgresql

from app.repositories.holiday_repository import HolidayRepository
from app.services.working_days import HolidayCalendar
from db.models.public_holiday import PublicHoliday


class TestHolidayRepository(unittest.TestCase):
    def test_holiday_dates_are_unique_per_country(self) -> None:
        unique_columns = [
            [column.name for column in constraint.columns]
            for constraint in PublicHoliday.__table__.constraints
            if isinstance(constraint, UniqueConstraint)
        ]

        self.assertEqual(unique_columns, [["country_code", "holiday_date"]])
        self.assertFalse(PublicHoliday.__table__.c.holiday_date.unique)

    def test_save_calendar_upserts_on_country_and_date(self) -> None:
        session = MagicMock()
        repository = HolidayRepository(session, country_code="SK")
        calendar = HolidayCalendar.of(
            {date(2025, 9, 1): "Constitution Day", date(2025, 1, 1): "Republic Day"}
        )

        saved = repository.save_calendar(calendar)

        self.assertEqual(saved, 2)
        session.commit.assert_called_once()
        statement = session.execute.call_args.args[0]
        sql = str(statement.compile(dialect=postgresql.dialect()))
        self.assertIn("ON CONFLICT ON CONSTRAINT uq_public_holidays_country_date DO UPDATE", sql)
        params = statement.compile(dialect=postgresql.dialect()).params
        self.assertIn("SET name = excluded.name", sql)
        self.assertEqual(list(params.values()).count("SK"), 2)

    def test_empty_calendar_writes_nothing(self) -> None:
        session = MagicMock()

        self.assertEqual(HolidayRepository(session).save_calendar(HolidayCalendar()), 0)
        session.execute.assert_not_called()


if __name__ == "__main__":
    unittest.main()
