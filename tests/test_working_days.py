from __future__ import annotations

import unittest
from datetime import date

from app.services.working_days import (
    HolidayCalendar,
    calculate_working_days,
    country_holiday_calendar,
    iter_months,
    working_hours_for_period,
)


class TestWorkingDays(unittest.TestCase):
    def test_month_without_holidays(self) -> None:
        result = calculate_working_days(2025, 11)

        self.assertEqual(result.total_days, 30)
        self.assertEqual(result.weekdays, 20)
        self.assertEqual(result.business_days, 20)
        self.assertEqual(result.working_hours, 160.0)

    def test_weekday_holiday_is_excluded(self) -> None:
        calendar = HolidayCalendar.of({date(2025, 11, 17): "Struggle for Freedom and Democracy Day"})

        result = calculate_working_days(2025, 11, calendar)

        self.assertEqual(result.business_days, 19)
        self.assertEqual(result.working_hours, 152.0)
        self.assertEqual(result.holidays[0].name, "Struggle for Freedom and Democracy Day")

    def test_weekend_holiday_does_not_reduce_count(self) -> None:
        result = calculate_working_days(2025, 11, [date(2025, 11, 1)])

        self.assertEqual(result.business_days, 20)
        self.assertEqual(result.holidays, [])

    def test_leap_february(self) -> None:
        result = calculate_working_days(2024, 2)

        self.assertEqual(result.total_days, 29)
        self.assertEqual(result.business_days, 21)

    def test_custom_daily_hours(self) -> None:
        result = calculate_working_days(2025, 11, standard_daily_hours=6.0)

        self.assertEqual(result.working_hours, 120.0)

    def test_invalid_month(self) -> None:
        with self.assertRaises(ValueError):
            calculate_working_days(2025, 13)

    def test_iter_months_crosses_year(self) -> None:
        self.assertEqual(
            iter_months(date(2024, 11, 20), date(2025, 2, 1)),
            [(2024, 11), (2024, 12), (2025, 1), (2025, 2)],
        )

    def test_period_hours_sum_whole_months(self) -> None:
        hours = working_hours_for_period(date(2025, 11, 15), date(2025, 12, 2))

        expected = calculate_working_days(2025, 11).working_hours + calculate_working_days(2025, 12).working_hours
        self.assertEqual(hours, expected)

    def test_calendar_helpers(self) -> None:
        calendar = HolidayCalendar.of([date(2025, 12, 24), date(2025, 12, 25), date(2026, 1, 1)])

        self.assertIn(date(2025, 12, 24), calendar)
        self.assertEqual(calendar.in_month(2025, 12), [date(2025, 12, 24), date(2025, 12, 25)])
        self.assertEqual(calendar.name_for(date(2026, 1, 1)), "")
        self.assertIsNone(calendar.name_for(date(2026, 1, 2)))


class TestCountryHolidayCalendar(unittest.TestCase):
    def test_czech_statehood_day_reduces_october(self) -> None:
        calendar = country_holiday_calendar([2025], "CZ")

        without = calculate_working_days(2025, 10)
        with_holidays = calculate_working_days(2025, 10, calendar)

        self.assertIn(date(2025, 10, 28), calendar)
        self.assertEqual(without.working_hours, 184.0)
        self.assertEqual(with_holidays.business_days, 22)
        self.assertEqual(with_holidays.working_hours, 176.0)
        self.assertEqual([holiday.date for holiday in with_holidays.holidays], [date(2025, 10, 28)])

    def test_calendar_covers_each_requested_year(self) -> None:
        calendar = country_holiday_calendar([2026, 2025, 2025])

        self.assertIn(date(2025, 11, 17), calendar)
        self.assertIn(date(2026, 11, 17), calendar)
        self.assertNotIn(date(2024, 11, 17), calendar)
        self.assertTrue(all(name for name in calendar.holidays.values()))

    def test_unknown_country_is_rejected(self) -> None:
        with self.assertRaises(NotImplementedError):
            country_holiday_calendar([2025], "ZZ")


if __name__ == "__main__":
    unittest.main()
