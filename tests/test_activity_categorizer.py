from __future__ import annotations

import unittest

from app.services.activity_categorizer import (
    FALLBACK_CATEGORY,
    GUIDING_CATEGORY,
    KeywordRule,
    KeywordRuleSet,
    activity_summary,
    categorize_entries,
    quality_score,
)
from tests.fakes import make_entry, stored_from

RULES = KeywordRuleSet.from_rules(
    [
        KeywordRule("OPS_Hiring", "interview"),
        KeywordRule("OPS_Hiring", "hiring"),
        KeywordRule("OPS_Jobs", "job"),
        KeywordRule("OPS_Reviews", "review"),
        KeywordRule("OPS_Reviews", "job review"),
        KeywordRule("OPS_Jobs", "retired", active=False),
    ]
)


def _entry(activity_name: str, project_name: str = "OPS_2025", description: str | None = None, hours: float = 1.0):
    return stored_from(
        make_entry(activity_name=activity_name, project_name=project_name, description=description, hours=hours)
    )


class TestKeywordRuleSet(unittest.TestCase):
    def test_priority_order_decides_between_matches(self) -> None:
        self.assertEqual(RULES.match("Job review call"), "OPS_Jobs")
        self.assertEqual(RULES.match("HIRING sync"), "OPS_Hiring")

    def test_inactive_and_unknown_rules_are_ignored(self) -> None:
        rules = KeywordRuleSet.from_rules(
            [KeywordRule("OPS_Jobs", "retired", active=False), KeywordRule("Marketing", "campaign")]
        )

        self.assertIsNone(rules.match("retired campaign"))
        self.assertEqual(rules.keywords_for("Marketing"), ())

    def test_custom_priority(self) -> None:
        rules = KeywordRuleSet.from_rules(
            [KeywordRule("OPS_Jobs", "job"), KeywordRule("OPS_Reviews", "review")],
            priority=("OPS_Reviews", "OPS_Jobs"),
        )

        self.assertEqual(rules.match("job review"), "OPS_Reviews")


class TestCategorizeEntries(unittest.TestCase):
    def test_no_in_scope_entries_scores_100(self) -> None:
        result = categorize_entries([_entry("Planning", project_name="Interní_2025")], RULES)

        self.assertEqual(result.quality_score, 100.0)
        self.assertEqual(result.in_scope_count, 0)
        self.assertIsNone(result.entries[0].category)

    def test_empty_input_scores_100(self) -> None:
        self.assertEqual(categorize_entries([], RULES).quality_score, 100.0)

    def test_half_matched_scores_50(self) -> None:
        result = categorize_entries([_entry("Candidate interview"), _entry("Misc admin")], RULES)

        self.assertEqual(result.quality_score, 50.0)
        self.assertEqual([item.category for item in result.entries], ["OPS_Hiring", FALLBACK_CATEGORY])
        self.assertEqual(len(result.unpaired), 1)

    def test_description_is_searched(self) -> None:
        result = categorize_entries([_entry("Call", description="Portfolio review")], RULES)

        self.assertEqual(result.entries[0].category, "OPS_Reviews")

    def test_guiding_project_wins_over_keywords(self) -> None:
        result = categorize_entries([_entry("Hiring interview", project_name="Guiding_2025")], RULES)

        self.assertEqual(result.entries[0].category, GUIDING_CATEGORY)
        self.assertEqual(result.quality_score, 100.0)

    def test_out_of_scope_projects_are_not_counted(self) -> None:
        result = categorize_entries(
            [_entry("Interview"), _entry("Interview", project_name="R&D_2025"), _entry("Nothing")],
            RULES,
        )

        self.assertEqual(result.in_scope_count, 2)
        self.assertEqual(result.matched_count, 1)
        self.assertEqual(result.quality_score, 50.0)

    def test_custom_fallback(self) -> None:
        result = categorize_entries([_entry("Misc")], RULES, fallback_category="Other OPS")

        self.assertEqual(result.entries[0].category, "Other OPS")
        self.assertEqual(result.quality_score, 0.0)

    def test_quality_score_rounding(self) -> None:
        self.assertEqual(quality_score(3, 1), 33.3)
        self.assertEqual(quality_score(3, 2), 66.7)

    def test_activity_summary(self) -> None:
        result = categorize_entries(
            [_entry("Interview", hours=3), _entry("Job post", hours=1), _entry("Misc", hours=1)],
            RULES,
        )

        summary = activity_summary(result)

        self.assertEqual([item.category for item in summary], ["OPS_Hiring", "OPS_Jobs", FALLBACK_CATEGORY])
        self.assertEqual(summary[0].percentage, 60.0)


if __name__ == "__main__":
    unittest.main()
