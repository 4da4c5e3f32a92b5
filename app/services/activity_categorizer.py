"""
app/services/activity_categorizer.py

Keyword-driven categorization of in-scope timesheet entries.

Rules:

* Only entries whose project maps to one of ``scope_categories`` (the OPS and
  Guiding project family by default) are categorized; others stay ``None``
  and do not count toward the quality score.
* Entries of a Guiding project resolve to ``OPS_Guiding`` before any keyword
  matching.
* Otherwise the search text is ``"<activity name> <description>"``,
  case-folded; categories are tried in the configured priority order and the
  first one with a matching active keyword wins.
* No match resolves to the fallback category.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Sequence

from app.config import DEFAULT_CATEGORIZED_PROJECTS, DEFAULT_CATEGORY_PRIORITY
from app.domain.timesheet import StoredEntry
from app.services.project_categories import is_guiding_project, map_project_category

logger = logging.getLogger(__name__)

FALLBACK_CATEGORY = "Unpaired"
GUIDING_CATEGORY = "OPS_Guiding"


@dataclass(frozen=True)
class KeywordRule:
    category: str
    keyword: str
    active: bool = True
    id: str | None = None


@dataclass(frozen=True)
class KeywordRuleSet:
    """
    Active keywords grouped by category, in category priority order.
    """

    categories: tuple[tuple[str, tuple[str, ...]], ...]

    @classmethod
    def from_rules(
        cls,
        rules: Iterable[KeywordRule],
        *,
        priority: Sequence[str] = DEFAULT_CATEGORY_PRIORITY,
    ) -> "KeywordRuleSet":
        known = set(priority)
        grouped: dict[str, list[str]] = defaultdict(list)
        for rule in rules:
            if not rule.active:
                continue
            keyword = rule.keyword.strip().casefold()
            if not keyword:
                continue
            if rule.category not in known:
                logger.warning(
                    "Ignoring keyword %r for category %r outside the priority list",
                    rule.keyword,
                    rule.category,
                )
                continue
            if keyword not in grouped[rule.category]:
                grouped[rule.category].append(keyword)
        return cls(categories=tuple((category, tuple(grouped.get(category, ()))) for category in priority))

    def keywords_for(self, category: str) -> tuple[str, ...]:
        for name, keywords in self.categories:
            if name == category:
                return keywords
        return ()

    def match(self, search_text: str) -> str | None:
        text = search_text.casefold()
        for category, keywords in self.categories:
            if any(keyword in text for keyword in keywords):
                return category
        return None


@dataclass(frozen=True)
class CategorizedEntry:
    entry: StoredEntry
    category: str | None

    @property
    def in_scope(self) -> bool:
        return self.category is not None


@dataclass(frozen=True)
class CategorizationResult:
    entries: list[CategorizedEntry]
    quality_score: float
    in_scope_count: int
    matched_count: int
    fallback_category: str = FALLBACK_CATEGORY

    @property
    def in_scope(self) -> list[CategorizedEntry]:
        return [item for item in self.entries if item.in_scope]

    @property
    def unpaired(self) -> list[CategorizedEntry]:
        return [item for item in self.entries if item.category == self.fallback_category]


def build_search_text(activity_name: str | None, description: str | None) -> str:
    return f"{activity_name or ''} {description or ''}".casefold()


def categorize_entry(
    entry: StoredEntry,
    rules: KeywordRuleSet,
    *,
    fallback_category: str = FALLBACK_CATEGORY,
) -> str:
    """
    Category of one entry, assuming it is in scope.
    """

    if is_guiding_project(entry.project_name):
        return GUIDING_CATEGORY
    matched = rules.match(build_search_text(entry.activity_name, entry.description))
    return matched if matched is not None else fallback_category


def quality_score(in_scope_count: int, matched_count: int) -> float:
    """
    Percentage of in-scope entries with a non-fallback category; 100 when none.
    """

    if in_scope_count == 0:
        return 100.0
    return round(matched_count / in_scope_count * 100, 1)


def categorize_entries(
    entries: Iterable[StoredEntry],
    rules: KeywordRuleSet,
    *,
    scope_categories: Sequence[str] = DEFAULT_CATEGORIZED_PROJECTS,
    fallback_category: str = FALLBACK_CATEGORY,
) -> CategorizationResult:
    scope = set(scope_categories)
    categorized: list[CategorizedEntry] = []
    in_scope_count = matched_count = 0

    for entry in entries:
        if map_project_category(entry.project_name) not in scope:
            categorized.append(CategorizedEntry(entry=entry, category=None))
            continue
        category = categorize_entry(entry, rules, fallback_category=fallback_category)
        in_scope_count += 1
        if category != fallback_category:
            matched_count += 1
        categorized.append(CategorizedEntry(entry=entry, category=category))

    return CategorizationResult(
        entries=categorized,
        quality_score=quality_score(in_scope_count, matched_count),
        in_scope_count=in_scope_count,
        matched_count=matched_count,
        fallback_category=fallback_category,
    )


@dataclass(frozen=True)
class ActivitySummary:
    category: str
    total_hours: float
    entry_count: int
    percentage: float


def activity_summary(result: CategorizationResult) -> list[ActivitySummary]:
    """
    Hours and entry counts per category of the in-scope entries, largest first.
    """

    hours: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    for item in result.in_scope:
        category = item.category or result.fallback_category
        hours[category] += item.entry.hours
        counts[category] += 1

    total_hours = sum(hours.values())
    summaries = [
        ActivitySummary(
            category=category,
            total_hours=round(category_hours, 2),
            entry_count=counts[category],
            percentage=round(category_hours / total_hours * 100, 1) if total_hours > 0 else 0.0,
        )
        for category, category_hours in hours.items()
    ]
    return sorted(summaries, key=lambda summary: (-summary.total_hours, summary.category))
