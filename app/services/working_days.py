"""
app/services/working_days.py

Business-day calendar: weekdays of a month minus public holidays.

Pure functions; the holiday set is passed in as a ``HolidayCalendar`` value
object. ``country_holiday_calendar`` builds one from the official holiday
tables and ``HolidayRepository.load_calendar`` reads the stored one.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping

from holidays import country_holidays

STANDARD_DAILY_HOURS = 8.0
DEFAULT_COUNTRY_CODE = "CZ"


@dataclass(frozen=True)
class HolidayCalendar:
    """
    Immutable set of holiday dates with optional display names.
    """

    holidays: Mapping[date, str] = field(default_factory=dict)

    @classmethod
    def of(cls, holidays: Iterable[date] | Mapping[date, str] | None = None) -> "HolidayCalendar":
        if holidays is None:
            return cls()
        if isinstance(holidays, Mapping):
            return cls(dict(holidays))
        return cls({holiday: "" for holiday in holidays})

    def __contains__(self, day: object) -> bool:
        return day in self.holidays

    def name_for(self, day: date) -> str | None:
        return self.holidays.get(day)

    def in_month(self, year: int, month: int) -> list[date]:
        return sorted(day for day in self.holidays if day.year == year and day.month == month)


def country_holiday_calendar(years: Iterable[int], country_code: str = DEFAULT_COUNTRY_CODE) -> HolidayCalendar:
    """
    Official public holidays of ``country_code`` for ``years``.

    Holiday names come in the country's default language.
    """

    source = country_holidays(country_code, years=sorted(set(years)))
    return HolidayCalendar.of(dict(sorted(source.items())))


@dataclass(frozen=True)
class HolidayOnWeekday:
    date: date
    name: str


@dataclass(frozen=True)
class WorkingDaysResult:
    """
    Working-day breakdown for one calendar month.
    """

    year: int
    month: int
    total_days: int
    weekdays: int
    holidays: list[HolidayOnWeekday]
    business_days: int
    working_hours: float


def calculate_working_days(
    year: int,
    month: int,
    holidays: HolidayCalendar | Iterable[date] | None = None,
    *,
    standard_daily_hours: float = STANDARD_DAILY_HOURS,
) -> WorkingDaysResult:
    """
    Count business days of ``year``/``month``.

    A business day is Monday-Friday and not in ``holidays``; holidays that
    fall on a weekend do not reduce the count.
    """

    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")

    holiday_calendar = holidays if isinstance(holidays, HolidayCalendar) else HolidayCalendar.of(holidays)
    total_days = calendar.monthrange(year, month)[1]

    weekdays = 0
    weekday_holidays: list[HolidayOnWeekday] = []
    for day_number in range(1, total_days + 1):
        day = date(year, month, day_number)
        if day.weekday() >= 5:
            continue
        weekdays += 1
        if day in holiday_calendar:
            weekday_holidays.append(HolidayOnWeekday(date=day, name=holiday_calendar.name_for(day) or ""))

    business_days = weekdays - len(weekday_holidays)
    return WorkingDaysResult(
        year=year,
        month=month,
        total_days=total_days,
        weekdays=weekdays,
        holidays=weekday_holidays,
        business_days=business_days,
        working_hours=business_days * standard_daily_hours,
    )


def iter_months(date_from: date, date_to: date) -> list[tuple[int, int]]:
    """
    Return every ``(year, month)`` touched by the inclusive date range.
    """

    months: list[tuple[int, int]] = []
    year, month = date_from.year, date_from.month
    while (year, month) <= (date_to.year, date_to.month):
        months.append((year, month))
        month += 1
        if month > 12:
            month = 1
            year += 1
    return months


def working_hours_for_period(
    date_from: date,
    date_to: date,
    holidays: HolidayCalendar | Iterable[date] | None = None,
    *,
    standard_daily_hours: float = STANDARD_DAILY_HOURS,
) -> float:
    """
    Expected working hours of every whole month the range touches.

    Partial months count in full, so 2025-01-15..2025-02-10 yields the
    hours of January plus February.
    """

    holiday_calendar = holidays if isinstance(holidays, HolidayCalendar) else HolidayCalendar.of(holidays)
    return sum(
        calculate_working_days(
            year,
            month,
            holiday_calendar,
            standard_daily_hours=standard_daily_hours,
        ).working_hours
        for year, month in iter_months(date_from, date_to)
    )
