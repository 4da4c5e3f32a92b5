"""
app/services/fte_service.py

FTE engine: actual FTE from tracked hours and planned FTE targets resolved
from effective-dated history records.

Everything here is a pure function of its inputs. Planned targets arrive as a
``PlannedFTEHistory`` value object; the holiday set as a ``HolidayCalendar``.
"""

from __future__ import annotations

import calendar
import math
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from app.domain.timesheet import StoredEntry
from app.services.working_days import (
    STANDARD_DAILY_HOURS,
    HolidayCalendar,
    calculate_working_days,
    iter_months,
    working_hours_for_period,
)

MIN_FTE_VALUE = 0.0
MAX_FTE_VALUE = 2.0
FTE_STEP = 0.05

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class PlannedFTEOverlapError(ValueError):
    """
    Raised when two planned FTE records of one person cover the same day.
    """


class InvalidFTEValueError(ValueError):
    """
    Raised when a planned FTE value is outside 0-2 or not a 0.05 step.
    """


def calculate_fte(tracked_hours: float, expected_hours: float) -> float:
    """
    Ratio of tracked to expected hours; 0 when nothing is expected.
    """

    if expected_hours <= 0:
        return 0.0
    return max(0.0, tracked_hours / expected_hours)


def validate_fte_value(value: float) -> float:
    fte = float(value)
    if not math.isfinite(fte) or not MIN_FTE_VALUE <= fte <= MAX_FTE_VALUE:
        raise InvalidFTEValueError(f"FTE must be between {MIN_FTE_VALUE:g} and {MAX_FTE_VALUE:g}, got {value!r}.")
    steps = fte / FTE_STEP
    if abs(steps - round(steps)) > 1e-9:
        raise InvalidFTEValueError(f"FTE must be in increments of {FTE_STEP:g}, got {value!r}.")
    return round(fte, 2)


# ---------------------------------------------------------------------------
# Planned FTE history
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlannedFTERecord:
    """
    One planned FTE target valid from ``valid_from`` until ``valid_to`` (inclusive).

    ``valid_to`` of ``None`` means the record is still in effect.
    """

    person_name: str
    fte_value: float
    valid_from: date
    valid_to: date | None = None
    id: str | None = None
    person_id: int | None = None
    created_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.valid_to is None

    def covers(self, day: date) -> bool:
        return self.valid_from <= day and (self.valid_to is None or day <= self.valid_to)


@dataclass(frozen=True)
class CurrentTarget:
    record: PlannedFTERecord
    status: str


@dataclass(frozen=True)
class TargetChange:
    """
    Result of recording a new target: the closed predecessor and the new record.
    """

    history: "PlannedFTEHistory"
    new_record: PlannedFTERecord
    closed_record: PlannedFTERecord | None


class PlannedFTEHistory:
    """
    Validated, per-person, non-overlapping planned FTE records.
    """

    def __init__(self, records: Iterable[PlannedFTERecord] = ()) -> None:
        by_person: dict[str, list[PlannedFTERecord]] = defaultdict(list)
        for record in records:
            by_person[record.person_name].append(record)

        self._by_person: dict[str, tuple[PlannedFTERecord, ...]] = {}
        for person_name, person_records in by_person.items():
            ordered = sorted(person_records, key=lambda record: record.valid_from)
            _check_intervals(person_name, ordered)
            self._by_person[person_name] = tuple(ordered)

    @property
    def records(self) -> list[PlannedFTERecord]:
        return [record for person in sorted(self._by_person) for record in self._by_person[person]]

    @property
    def people(self) -> list[str]:
        return sorted(self._by_person)

    def history(self, person_name: str) -> list[PlannedFTERecord]:
        """
        All records of one person, newest ``valid_from`` first.
        """

        return list(reversed(self._by_person.get(person_name, ())))

    def lookup(self, person_name: str, on: date) -> PlannedFTERecord | None:
        """
        Record in effect for ``person_name`` on ``on``, or None.

        Picks the latest ``valid_from`` not after ``on``; when that record
        already ended before ``on`` there is no target.
        """

        candidate: PlannedFTERecord | None = None
        for record in self._by_person.get(person_name, ()):
            if record.valid_from > on:
                break
            candidate = record
        if candidate is None:
            return None
        if candidate.valid_to is not None and candidate.valid_to < on:
            return None
        return candidate

    def planned_fte(self, person_name: str, on: date) -> float | None:
        record = self.lookup(person_name, on)
        return record.fte_value if record is not None else None

    def current_targets(self) -> list[CurrentTarget]:
        """
        Latest record of every person, tagged ``active`` or ``historical``.
        """

        return [
            CurrentTarget(
                record=self._by_person[person][-1],
                status="active" if self._by_person[person][-1].is_active else "historical",
            )
            for person in sorted(self._by_person)
        ]

    def with_new_target(self, person_name: str, fte_value: float, valid_from: date) -> TargetChange:
        """
        Record a new target, closing the person's open record the day before.
        """

        fte = validate_fte_value(fte_value)
        records = list(self._by_person.get(person_name, ()))
        closed: PlannedFTERecord | None = None

        open_records = [record for record in records if record.valid_to is None]
        if open_records:
            current = open_records[-1]
            if current.valid_from >= valid_from:
                raise PlannedFTEOverlapError(
                    f"{person_name}: new target from {valid_from.isoformat()} does not start after "
                    f"the open record from {current.valid_from.isoformat()}."
                )
            closed = replace(current, valid_to=valid_from - timedelta(days=1))
            records[records.index(current)] = closed

        new_record = PlannedFTERecord(person_name=person_name, fte_value=fte, valid_from=valid_from)
        records.append(new_record)

        others = [record for person, items in self._by_person.items() if person != person_name for record in items]
        return TargetChange(
            history=PlannedFTEHistory(others + records),
            new_record=new_record,
            closed_record=closed,
        )


def _check_intervals(person_name: str, ordered: Sequence[PlannedFTERecord]) -> None:
    for record in ordered:
        if record.valid_to is not None and record.valid_to < record.valid_from:
            raise PlannedFTEOverlapError(
                f"{person_name}: valid_to {record.valid_to.isoformat()} precedes "
                f"valid_from {record.valid_from.isoformat()}."
            )
    for previous, current in zip(ordered, ordered[1:]):
        if previous.valid_to is None or previous.valid_to >= current.valid_from:
            raise PlannedFTEOverlapError(
                f"{person_name}: record from {previous.valid_from.isoformat()} overlaps "
                f"record from {current.valid_from.isoformat()}."
            )


# ---------------------------------------------------------------------------
# Actual FTE
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PersonFTE:
    """
    Actual (and, when a target exists, planned) FTE of one person for a period.
    """

    person_id: int
    person_name: str
    date_from: date
    date_to: date
    actual_hours: float
    expected_hours: float
    actual_fte: float
    planned_fte: float | None = None
    deviation_percent: float | None = None

    @property
    def has_target(self) -> bool:
        return self.planned_fte is not None


def deviation_percent(actual_fte: float, planned_fte: float) -> float:
    if planned_fte <= 0:
        return 0.0
    return round((actual_fte - planned_fte) / planned_fte * 100, 1)


def period_fte(
    entries: Iterable[StoredEntry],
    date_from: date,
    date_to: date,
    *,
    holidays: HolidayCalendar | None = None,
    planned: PlannedFTEHistory | None = None,
    standard_daily_hours: float = STANDARD_DAILY_HOURS,
) -> list[PersonFTE]:
    """
    Per-person FTE over ``date_from..date_to``, sorted by person name.

    Expected hours are those of every whole month in the range; planned
    targets are resolved as of ``date_to``.
    """

    expected_hours = working_hours_for_period(
        date_from,
        date_to,
        holidays,
        standard_daily_hours=standard_daily_hours,
    )

    hours_by_person: dict[int, float] = defaultdict(float)
    names: dict[int, str] = {}
    for entry in entries:
        if not date_from <= entry.date <= date_to:
            continue
        hours_by_person[entry.person_id] += entry.hours
        names.setdefault(entry.person_id, entry.person_name)

    results: list[PersonFTE] = []
    for person_id, actual_hours in hours_by_person.items():
        person_name = names[person_id]
        actual = calculate_fte(actual_hours, expected_hours)
        target = planned.planned_fte(person_name, date_to) if planned is not None else None
        results.append(
            PersonFTE(
                person_id=person_id,
                person_name=person_name,
                date_from=date_from,
                date_to=date_to,
                actual_hours=actual_hours,
                expected_hours=expected_hours,
                actual_fte=actual,
                planned_fte=target,
                deviation_percent=deviation_percent(actual, target) if target is not None else None,
            )
        )
    return sorted(results, key=lambda result: (result.person_name.casefold(), result.person_id))


def monthly_fte(
    entries: Iterable[StoredEntry],
    year: int,
    month: int,
    *,
    holidays: HolidayCalendar | None = None,
    planned: PlannedFTEHistory | None = None,
    standard_daily_hours: float = STANDARD_DAILY_HOURS,
) -> list[PersonFTE]:
    """
    Per-person FTE of one calendar month.
    """

    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    return period_fte(
        entries,
        date(year, month, 1),
        date(year, month, calendar.monthrange(year, month)[1]),
        holidays=holidays,
        planned=planned,
        standard_daily_hours=standard_daily_hours,
    )


@dataclass(frozen=True)
class FTEStats:
    total_fte: float = 0.0
    average_fte: float = 0.0
    highest_fte: float = 0.0
    lowest_fte: float = 0.0
    team_member_count: int = 0
    with_target_count: int = 0
    over_target_count: int = 0
    under_target_count: int = 0
    on_target_count: int = 0
    total_planned_fte: float = 0.0


def fte_stats(results: Sequence[PersonFTE], *, tolerance: float = 0.0) -> FTEStats:
    """
    Team reductions over per-person results.

    People without a planned target count toward totals and averages but
    are left out of every target comparison.
    """

    if not results:
        return FTEStats()

    values = [result.actual_fte for result in results]
    total = sum(values)
    over = under = on_target = 0
    planned_total = 0.0
    targeted = [result for result in results if result.planned_fte is not None]
    for result in targeted:
        planned_value = float(result.planned_fte or 0.0)
        planned_total += planned_value
        difference = result.actual_fte - planned_value
        if difference > tolerance:
            over += 1
        elif difference < -tolerance:
            under += 1
        else:
            on_target += 1

    return FTEStats(
        total_fte=total,
        average_fte=total / len(results),
        highest_fte=max(values),
        lowest_fte=min(values),
        team_member_count=len(results),
        with_target_count=len(targeted),
        over_target_count=over,
        under_target_count=under,
        on_target_count=on_target,
        total_planned_fte=planned_total,
    )


@dataclass(frozen=True)
class MonthlyTeamFTE:
    year: int
    month: int
    label: str
    total_hours: float
    expected_hours: float
    total_fte: float
    average_fte: float
    team_size: int


def monthly_fte_trend(
    entries: Iterable[StoredEntry],
    date_from: date,
    date_to: date,
    *,
    holidays: HolidayCalendar | None = None,
    standard_daily_hours: float = STANDARD_DAILY_HOURS,
) -> list[MonthlyTeamFTE]:
    """
    Team FTE per month of the range; months without entries are omitted.
    """

    hours: dict[tuple[int, int], float] = defaultdict(float)
    people: dict[tuple[int, int], set[int]] = defaultdict(set)
    for entry in entries:
        if not date_from <= entry.date <= date_to:
            continue
        month_key = (entry.date.year, entry.date.month)
        hours[month_key] += entry.hours
        people[month_key].add(entry.person_id)

    trend: list[MonthlyTeamFTE] = []
    for year, month in iter_months(date_from, date_to):
        if (year, month) not in hours:
            continue
        expected = calculate_working_days(
            year,
            month,
            holidays,
            standard_daily_hours=standard_daily_hours,
        ).working_hours
        total_fte = calculate_fte(hours[(year, month)], expected)
        team_size = len(people[(year, month)])
        trend.append(
            MonthlyTeamFTE(
                year=year,
                month=month,
                label=f"{MONTH_LABELS[month - 1]} {year}",
                total_hours=hours[(year, month)],
                expected_hours=expected,
                total_fte=total_fte,
                average_fte=total_fte / team_size if team_size else 0.0,
                team_size=team_size,
            )
        )
    return trend
