"""
app/services/analytics_service.py

Database-backed entry point for the analytics calculations.

Every call re-reads entries, keyword rules, holidays and planned FTE records
from the session, then hands them to the pure calculation modules. Nothing is
cached between calls.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date

from sqlalchemy.orm import Session

from app.config import AnalyticsSettings, get_analytics_settings
from app.domain.timesheet import EntryFilter
from app.repositories.activity_keyword_repository import ActivityKeywordRepository
from app.repositories.holiday_repository import HolidayRepository
from app.repositories.planned_fte_repository import PlannedFTERepository
from app.repositories.timesheet_entry_repository import TimesheetEntryRepository
from app.services.activity_categorizer import CategorizationResult, KeywordRuleSet, categorize_entries
from app.services.fte_service import (
    CurrentTarget,
    MonthlyTeamFTE,
    PersonFTE,
    PlannedFTERecord,
    monthly_fte,
    monthly_fte_trend,
)
from app.services.metrics_service import MetricsSnapshot, build_snapshot
from app.services.working_days import HolidayCalendar, WorkingDaysResult, calculate_working_days

logger = logging.getLogger(__name__)


def _month_bounds(date_from: date, date_to: date) -> tuple[date, date]:
    last_day = calendar.monthrange(date_to.year, date_to.month)[1]
    return date(date_from.year, date_from.month, 1), date(date_to.year, date_to.month, last_day)


class AnalyticsService:
    def __init__(self, session: Session, *, settings: AnalyticsSettings | None = None) -> None:
        self._settings = settings or get_analytics_settings()
        self._entries = TimesheetEntryRepository(session, commit=False)
        self._keywords = ActivityKeywordRepository(session)
        self._holidays = HolidayRepository(session)
        self._planned = PlannedFTERepository(session, commit=False)

    def snapshot(self, *, date_from: date, date_to: date) -> MetricsSnapshot:
        entries = self._entries.list_entries(EntryFilter(date_from=date_from, date_to=date_to))
        snapshot = build_snapshot(
            entries,
            date_from=date_from,
            date_to=date_to,
            rules=self._rule_set(),
            settings=self._settings,
            holidays=self._calendar(date_from, date_to),
            planned=self._planned.load_history(),
        )
        logger.info(
            "Computed analytics snapshot %s..%s entries=%d people=%d quality=%.1f",
            date_from,
            date_to,
            snapshot.dashboard.entry_count,
            snapshot.dashboard.team_member_count,
            snapshot.dashboard.quality_score,
        )
        return snapshot

    def working_days(self, year: int, month: int) -> WorkingDaysResult:
        first_day = date(year, month, 1)
        return calculate_working_days(
            year,
            month,
            self._calendar(first_day, first_day),
            standard_daily_hours=self._settings.standard_daily_hours,
        )

    def monthly_fte(self, year: int, month: int) -> list[PersonFTE]:
        month_start, month_end = _month_bounds(date(year, month, 1), date(year, month, 1))
        entries = self._entries.list_entries(EntryFilter(date_from=month_start, date_to=month_end))
        return monthly_fte(
            entries,
            year,
            month,
            holidays=self._calendar(month_start, month_end),
            planned=self._planned.load_history(),
            standard_daily_hours=self._settings.standard_daily_hours,
        )

    def fte_trend(self, *, date_from: date, date_to: date) -> list[MonthlyTeamFTE]:
        entries = self._entries.list_entries(EntryFilter(date_from=date_from, date_to=date_to))
        return monthly_fte_trend(
            entries,
            date_from,
            date_to,
            holidays=self._calendar(date_from, date_to),
            standard_daily_hours=self._settings.standard_daily_hours,
        )

    def planned_fte(self, person_name: str, on: date) -> PlannedFTERecord | None:
        return self._planned.load_history().lookup(person_name, on)

    def fte_history(self, person_name: str) -> list[PlannedFTERecord]:
        return self._planned.history(person_name)

    def current_targets(self) -> list[CurrentTarget]:
        return self._planned.load_history().current_targets()

    def categorize(self, *, date_from: date, date_to: date) -> CategorizationResult:
        entries = self._entries.list_entries(EntryFilter(date_from=date_from, date_to=date_to))
        return categorize_entries(
            entries,
            self._rule_set(),
            scope_categories=self._settings.categorized_project_categories,
            fallback_category=self._settings.fallback_category,
        )

    def _rule_set(self) -> KeywordRuleSet:
        return KeywordRuleSet.from_rules(
            self._keywords.list_rules(),
            priority=self._settings.category_priority,
        )

    def _calendar(self, date_from: date, date_to: date) -> HolidayCalendar:
        month_start, month_end = _month_bounds(date_from, date_to)
        return self._holidays.load_calendar(month_start, month_end)
