from __future__ import annotations

import unittest

from app.validators.mapping_validator import MappingErrorDetail, MappingValidator, SchemaMappingError


class TestMappingValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = MappingValidator(
            required_fields=("person_name", "project_name", "activity_name", "date", "hours"),
            canonical_fields=(
                "person_name",
                "project_name",
                "activity_name",
                "date",
                "hours",
                "description",
            ),
        )

    def test_raises_on_missing_required_fields(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                mapping={"person_name": "Person", "project_name": "Project"},
                source_headers=("Person", "Project"),
            )

        self.assertEqual(ctx.exception.missing_fields, ["activity_name", "date", "hours"])
        self.assertIn("activity_name, date, hours", ctx.exception.message)

    def test_collects_pre_errors_and_unknown_source_columns(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                mapping={
                    "person_name": "Person",
                    "project_name": "Project",
                    "activity_name": "Activity",
                    "date": "Date",
                    "hours": "Missing",
                },
                source_headers=("Person", "Project", "Activity", "Date"),
                pre_errors=[
                    MappingErrorDetail(
                        code="override_source_not_found",
                        message="manual override missing header",
                        canonical_field="hours",
                        source_column="Missing",
                    )
                ],
            )

        codes = [error.code for error in ctx.exception.errors]
        self.assertEqual(codes, ["override_source_not_found", "unknown_source_column"])

    def test_rejects_reused_source_column(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate(
                mapping={
                    "person_name": "Person",
                    "project_name": "Project",
                    "activity_name": "Project",
                    "date": "Date",
                    "hours": "Hours",
                },
                source_headers=("Person", "Project", "Date", "Hours"),
            )

        reused = {error.canonical_field for error in ctx.exception.errors if error.code == "source_column_reused"}
        self.assertEqual(reused, {"project_name", "activity_name"})

    def test_to_dict_is_serializable_shape(self) -> None:
        error = SchemaMappingError(
            message="Header mapping validation failed.",
            errors=[MappingErrorDetail(code="empty_headers", message="No headers.")],
        )

        payload = error.to_dict()

        self.assertEqual(payload["message"], "Header mapping validation failed.")
        self.assertEqual(payload["errors"][0]["code"], "empty_headers")

    def test_accepts_valid_mapping(self) -> None:
        self.validator.validate(
            mapping={
                "person_name": "Person",
                "project_name": "Project",
                "activity_name": "Activity",
                "date": "Date",
                "hours": "Hours",
            },
            source_headers=("Person", "Project", "Activity", "Date", "Hours"),
        )


if __name__ == "__main__":
    unittest.main()
