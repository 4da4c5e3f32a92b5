from __future__ import annotations

import unittest

from app.mappers.schema_mapper import SchemaMapper, normalize_header
from app.validators.mapping_validator import SchemaMappingError


class TestSchemaMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.mapper = SchemaMapper()

    def test_resolves_czech_export_headers(self) -> None:
        headers = ["Osoba", "Projekt", "Činnost", "Datum", "Natrackováno", "Popis"]

        resolution = self.mapper.resolve_mapping(headers)

        self.assertEqual(resolution.canonical_to_source["person_name"], "Osoba")
        self.assertEqual(resolution.canonical_to_source["project_name"], "Projekt")
        self.assertEqual(resolution.canonical_to_source["activity_name"], "Činnost")
        self.assertEqual(resolution.canonical_to_source["date"], "Datum")
        self.assertEqual(resolution.canonical_to_source["hours"], "Natrackováno")
        self.assertEqual(resolution.canonical_to_source["description"], "Popis")
        self.assertNotIn("person_id", resolution.canonical_to_source)

    def test_resolves_english_headers_case_insensitively(self) -> None:
        headers = ["Person ID", "Person Name", "PROJECT", "Task", "Date", "Hours", "Billable"]

        resolution = self.mapper.resolve_mapping(headers)

        self.assertEqual(resolution.canonical_to_source["person_id"], "Person ID")
        self.assertEqual(resolution.canonical_to_source["person_name"], "Person Name")
        self.assertEqual(resolution.canonical_to_source["project_name"], "PROJECT")
        self.assertEqual(resolution.canonical_to_source["activity_name"], "Task")
        self.assertEqual(resolution.canonical_to_source["billable"], "Billable")
        self.assertEqual(resolution.match_strategies["hours"], "alias")

    def test_higher_priority_alias_wins(self) -> None:
        headers = ["Person", "Project", "Task", "Activity", "Date", "Hours"]

        resolution = self.mapper.resolve_mapping(headers)

        self.assertEqual(resolution.canonical_to_source["activity_name"], "Activity")

    def test_manual_override_mapping_takes_precedence(self) -> None:
        headers = ["who", "where", "what", "when", "how long"]
        manual = {
            "person_name": "who",
            "project_name": "where",
            "activity_name": "what",
            "date": "when",
            "hours": "How Long",
        }

        resolution = self.mapper.resolve_mapping(headers, manual_overrides=manual)

        self.assertEqual(resolution.canonical_to_source["hours"], "how long")
        self.assertEqual(resolution.match_strategies["hours"], "override")

    def test_invalid_manual_override_raises_structured_error(self) -> None:
        headers = ["Person", "Project", "Activity", "Date", "Hours"]

        with self.assertRaises(SchemaMappingError) as ctx:
            self.mapper.resolve_mapping(headers, manual_overrides={"unknown_field": "Person"})

        error_codes = {error.code for error in ctx.exception.errors}
        self.assertIn("invalid_override_field", error_codes)

    def test_missing_required_mapping_raises_structured_error(self) -> None:
        headers = ["Person", "Project", "Activity", "Date"]

        with self.assertRaises(SchemaMappingError) as ctx:
            self.mapper.resolve_mapping(headers)

        self.assertEqual(ctx.exception.missing_fields, ["hours"])

    def test_empty_headers_are_rejected(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.mapper.resolve_mapping(["", None, "   "])

        self.assertEqual([error.code for error in ctx.exception.errors], ["empty_headers"])

    def test_map_row_projects_source_values(self) -> None:
        resolution = self.mapper.resolve_mapping(["Person", "Project", "Activity", "Date", "Hours", "Extra"])

        mapped = self.mapper.map_row(
            raw_row={
                "Person": "Jana",
                "Project": "OPS_2025",
                "Activity": "Hiring",
                "Date": "2025-11-03",
                "Hours": "2,5",
                "Extra": "ignored",
            },
            mapping=resolution,
        )

        self.assertEqual(mapped["person_name"], "Jana")
        self.assertEqual(mapped["hours"], "2,5")
        self.assertNotIn("Extra", mapped)

    def test_normalize_header_strips_accents_and_separators(self) -> None:
        self.assertEqual(normalize_header("  Natrackováno "), "natrackovano")
        self.assertEqual(normalize_header("Person-Name"), "person_name")
        self.assertEqual(normalize_header("E-mail"), "e_mail")


if __name__ == "__main__":
    unittest.main()
