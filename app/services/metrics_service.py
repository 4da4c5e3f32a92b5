"""
app/services/metrics_service.py

Roll-ups of stored entries, FTE results and categorization results into
project, activity, person and dashboard metrics.

Pure aggregation: an empty entry set yields zero-valued metrics.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence

from app.config import AnalyticsSettings
from app.domain.timesheet import StoredEntry
from app.services.activity_categorizer import CategorizationResult, KeywordRuleSet, categorize_entries
from app.services.fte_service import (
    FTEStats,
    MonthlyTeamFTE,
    PersonFTE,
    PlannedFTEHistory,
    calculate_fte,
    fte_stats,
    monthly_fte_trend,
    period_fte,
)
from app.services.project_categories import map_project_category
from app.services.working_days import HolidayCalendar, working_hours_for_period

NO_PERSON = "N/A"


def _percentage(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole > 0 else 0.0


@dataclass(frozen=True)
class ProjectMetrics:
    project_name: str
    project_category: str
    total_hours: float
    entry_count: int
    person_count: int
    fte: float
    percentage: float


@dataclass(frozen=True)
class ProjectCategoryMetrics:
    project_category: str
    total_hours: float
    entry_count: int
    person_count: int
    project_count: int
    fte: float
    percentage: float


@dataclass(frozen=True)
class ActivityMetrics:
    category: str
    total_hours: float
    entry_count: int
    person_count: int
    percentage: float


@dataclass(frozen=True)
class DashboardMetrics:
    team_hours: float = 0.0
    entry_count: int = 0
    team_member_count: int = 0
    total_team_fte: float = 0.0
    average_fte: float = 0.0
    highest_fte: float = 0.0
    highest_fte_person: str = NO_PERSON
    lowest_fte: float = 0.0
    lowest_fte_person: str = NO_PERSON
    quality_score: float = 100.0
    category_breakdown: list[ActivityMetrics] = field(default_factory=list)
    stats: FTEStats = field(default_factory=FTEStats)


@dataclass(frozen=True)
class MetricsSnapshot:
    """
    Derived, non-persisted analytics for one period.
    """

    date_from: date
    date_to: date
    expected_hours: float
    dashboard: DashboardMetrics
    projects: list[ProjectMetrics]
    project_categories: list[ProjectCategoryMetrics]
    activities: list[ActivityMetrics]
    people: list[PersonFTE]
    trend: list[MonthlyTeamFTE]


def project_metrics(entries: Iterable[StoredEntry], *, expected_hours: float) -> list[ProjectMetrics]:
    """
    Hours, entries and people per project name, largest first.
    """

    hours: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    people: dict[str, set[int]] = defaultdict(set)
    for entry in entries:
        hours[entry.project_name] += entry.hours
        counts[entry.project_name] += 1
        people[entry.project_name].add(entry.person_id)

    total_hours = sum(hours.values())
    metrics = [
        ProjectMetrics(
            project_name=project_name,
            project_category=map_project_category(project_name),
            total_hours=round(project_hours, 2),
            entry_count=counts[project_name],
            person_count=len(people[project_name]),
            fte=round(calculate_fte(project_hours, expected_hours), 2),
            percentage=_percentage(project_hours, total_hours),
        )
        for project_name, project_hours in hours.items()
    ]
    return sorted(metrics, key=lambda metric: (-metric.total_hours, metric.project_name))


def project_category_metrics(
    entries: Iterable[StoredEntry],
    *,
    expected_hours: float,
) -> list[ProjectCategoryMetrics]:
    hours: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    people: dict[str, set[int]] = defaultdict(set)
    projects: dict[str, set[str]] = defaultdict(set)
    for entry in entries:
        category = map_project_category(entry.project_name)
        hours[category] += entry.hours
        counts[category] += 1
        people[category].add(entry.person_id)
        projects[category].add(entry.project_name)

    total_hours = sum(hours.values())
    metrics = [
        ProjectCategoryMetrics(
            project_category=category,
            total_hours=round(category_hours, 2),
            entry_count=counts[category],
            person_count=len(people[category]),
            project_count=len(projects[category]),
            fte=round(calculate_fte(category_hours, expected_hours), 2),
            percentage=_percentage(category_hours, total_hours),
        )
        for category, category_hours in hours.items()
    ]
    return sorted(metrics, key=lambda metric: (-metric.total_hours, metric.project_category))


def activity_metrics(result: CategorizationResult) -> list[ActivityMetrics]:
    """
    Per-category hours, entries and people over the categorized entries.
    """

    hours: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    people: dict[str, set[int]] = defaultdict(set)
    for item in result.in_scope:
        category = item.category or result.fallback_category
        hours[category] += item.entry.hours
        counts[category] += 1
        people[category].add(item.entry.person_id)

    total_hours = sum(hours.values())
    metrics = [
        ActivityMetrics(
            category=category,
            total_hours=round(category_hours, 2),
            entry_count=counts[category],
            person_count=len(people[category]),
            percentage=_percentage(category_hours, total_hours),
        )
        for category, category_hours in hours.items()
    ]
    return sorted(metrics, key=lambda metric: (-metric.total_hours, metric.category))


def dashboard_metrics(
    entries: Sequence[StoredEntry],
    people: Sequence[PersonFTE],
    categorization: CategorizationResult,
    *,
    tolerance: float = 0.0,
) -> DashboardMetrics:
    stats = fte_stats(people, tolerance=tolerance)
    highest = max(people, key=lambda person: person.actual_fte, default=None)
    lowest = min(people, key=lambda person: person.actual_fte, default=None)
    return DashboardMetrics(
        team_hours=round(sum(entry.hours for entry in entries), 2),
        entry_count=len(entries),
        team_member_count=stats.team_member_count,
        total_team_fte=stats.total_fte,
        average_fte=stats.average_fte,
        highest_fte=stats.highest_fte,
        highest_fte_person=highest.person_name if highest is not None else NO_PERSON,
        lowest_fte=stats.lowest_fte,
        lowest_fte_person=lowest.person_name if lowest is not None else NO_PERSON,
        quality_score=categorization.quality_score,
        category_breakdown=activity_metrics(categorization),
        stats=stats,
    )


def build_snapshot(
    entries: Iterable[StoredEntry],
    *,
    date_from: date,
    date_to: date,
    rules: KeywordRuleSet,
    settings: AnalyticsSettings,
    holidays: HolidayCalendar | None = None,
    planned: PlannedFTEHistory | None = None,
) -> MetricsSnapshot:
    """
    Compute every metric for ``date_from..date_to`` from the given entries.
    """

    if date_to < date_from:
        raise ValueError("date_to must not precede date_from")

    in_period = [entry for entry in entries if date_from <= entry.date <= date_to]
    expected_hours = working_hours_for_period(
        date_from,
        date_to,
        holidays,
        standard_daily_hours=settings.standard_daily_hours,
    )
    people = period_fte(
        in_period,
        date_from,
        date_to,
        holidays=holidays,
        planned=planned,
        standard_daily_hours=settings.standard_daily_hours,
    )
    categorization = categorize_entries(
        in_period,
        rules,
        scope_categories=settings.categorized_project_categories,
        fallback_category=settings.fallback_category,
    )

    return MetricsSnapshot(
        date_from=date_from,
        date_to=date_to,
        expected_hours=expected_hours,
        dashboard=dashboard_metrics(
            in_period,
            people,
            categorization,
            tolerance=settings.fte_target_tolerance,
        ),
        projects=project_metrics(in_period, expected_hours=expected_hours),
        project_categories=project_category_metrics(in_period, expected_hours=expected_hours),
        activities=activity_metrics(categorization),
        people=people,
        trend=monthly_fte_trend(
            in_period,
            date_from,
            date_to,
            holidays=holidays,
            standard_daily_hours=settings.standard_daily_hours,
        ),
    )
