from __future__ import annotations

import unittest
from datetime import date

from app.config import AnalyticsSettings
from app.services.activity_categorizer import KeywordRule, KeywordRuleSet
from app.services.fte_service import PlannedFTEHistory, PlannedFTERecord
from app.services.metrics_service import NO_PERSON, build_snapshot, project_category_metrics, project_metrics
from tests.fakes import make_entry, stored_from

SETTINGS = AnalyticsSettings()
RULES = KeywordRuleSet.from_rules([KeywordRule("OPS_Hiring", "interview")])


def _entry(person_name: str, person_id: int, project_name: str, activity_name: str, hours: float, day: int = 3):
    return stored_from(
        make_entry(
            person_name=person_name,
            person_id=person_id,
            project_name=project_name,
            activity_name=activity_name,
            hours=hours,
            entry_date=date(2025, 11, day),
        )
    )


class TestMetricsService(unittest.TestCase):
    def test_empty_period_yields_zero_metrics(self) -> None:
        snapshot = build_snapshot(
            [],
            date_from=date(2025, 11, 1),
            date_to=date(2025, 11, 30),
            rules=RULES,
            settings=SETTINGS,
        )

        self.assertEqual(snapshot.expected_hours, 160.0)
        self.assertEqual(snapshot.dashboard.team_hours, 0.0)
        self.assertEqual(snapshot.dashboard.team_member_count, 0)
        self.assertEqual(snapshot.dashboard.highest_fte_person, NO_PERSON)
        self.assertEqual(snapshot.dashboard.quality_score, 100.0)
        self.assertEqual(snapshot.projects, [])
        self.assertEqual(snapshot.people, [])
        self.assertEqual(snapshot.trend, [])

    def test_snapshot_rolls_up_entries(self) -> None:
        entries = [
            _entry("Alice", 1, "OPS_2025", "Candidate interview", 60),
            _entry("Alice", 1, "Interní_2025", "Planning", 20),
            _entry("Bob", 2, "OPS_2025", "Misc", 40),
            _entry("Bob", 2, "OPS_2025", "Interview", 8, day=28),
            _entry("Bob", 2, "OPS_2025", "Interview", 8, day=1),
        ]
        entries.append(stored_from(make_entry(person_name="Eve", person_id=3, entry_date=date(2025, 12, 1))))
        planned = PlannedFTEHistory([PlannedFTERecord("Alice", 0.5, date(2025, 1, 1))])

        snapshot = build_snapshot(
            entries,
            date_from=date(2025, 11, 1),
            date_to=date(2025, 11, 30),
            rules=RULES,
            settings=SETTINGS,
            planned=planned,
        )

        dashboard = snapshot.dashboard
        self.assertEqual(dashboard.team_hours, 136.0)
        self.assertEqual(dashboard.entry_count, 5)
        self.assertEqual(dashboard.team_member_count, 2)
        self.assertEqual(dashboard.highest_fte_person, "Alice")
        self.assertEqual(dashboard.lowest_fte_person, "Bob")
        self.assertEqual(dashboard.quality_score, 75.0)
        self.assertEqual(dashboard.stats.over_target_count, 0)
        self.assertEqual(dashboard.stats.on_target_count, 1)

        self.assertEqual(snapshot.projects[0].project_name, "OPS_2025")
        self.assertEqual(snapshot.projects[0].total_hours, 116.0)
        self.assertEqual(snapshot.projects[0].person_count, 2)
        self.assertEqual([item.category for item in snapshot.activities], ["OPS_Hiring", "Unpaired"])
        self.assertEqual(snapshot.activities[0].total_hours, 76.0)
        self.assertEqual(len(snapshot.trend), 1)

    def test_project_category_metrics_group_by_bucket(self) -> None:
        entries = [
            _entry("Alice", 1, "OPS_2025", "Interview", 30),
            _entry("Bob", 2, "Design tým OPS_2025", "Interview", 10),
            _entry("Bob", 2, "Client site", "Design", 40),
        ]

        metrics = project_category_metrics(entries, expected_hours=160.0)

        by_category = {metric.project_category: metric for metric in metrics}
        self.assertEqual(by_category["OPS"].project_count, 2)
        self.assertEqual(by_category["OPS"].person_count, 2)
        self.assertEqual(by_category["OPS"].fte, 0.25)
        self.assertEqual(by_category["OPS"].percentage, 50.0)
        self.assertEqual(by_category["Other"].total_hours, 40.0)

    def test_project_metrics_without_expected_hours(self) -> None:
        metrics = project_metrics([_entry("Alice", 1, "OPS_2025", "Interview", 30)], expected_hours=0.0)

        self.assertEqual(metrics[0].fte, 0.0)
        self.assertEqual(metrics[0].percentage, 100.0)

    def test_inverted_range_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            build_snapshot(
                [],
                date_from=date(2025, 11, 30),
                date_to=date(2025, 11, 1),
                rules=RULES,
                settings=SETTINGS,
            )


if __name__ == "__main__":
    unittest.main()
