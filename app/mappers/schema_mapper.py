"""
app/mappers/schema_mapper.py

Header resolution for timesheet exports.

Each canonical field owns a priority-ordered list of accepted header
spellings (English and Czech exporter variants). Headers are compared after
normalization, so ``"Natrackováno"``, ``"natrackovano"`` and ``" NATRACKOVANO "``
all resolve to the hours column.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.validators.mapping_validator import (
    MappingErrorCode,
    MappingErrorDetail,
    MappingValidator,
    SchemaMappingError,
)

CANONICAL_FIELDS: tuple[str, ...] = (
    "person_id",
    "person_name",
    "person_email",
    "project_id",
    "project_name",
    "activity_id",
    "activity_name",
    "date",
    "hours",
    "description",
    "approved",
    "billable",
)

REQUIRED_CANONICAL_FIELDS: tuple[str, ...] = (
    "person_name",
    "project_name",
    "activity_name",
    "date",
    "hours",
)

DEFAULT_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "person_id": ("person_id", "personid", "user_id", "userid"),
    "person_name": ("person_name", "personname", "person", "name", "user", "username", "osoba"),
    "person_email": ("person_email", "personemail", "email", "user_email", "e-mail"),
    "project_id": ("project_id", "projectid"),
    "project_name": ("project_name", "projectname", "project", "projekt"),
    "activity_id": ("activity_id", "activityid"),
    "activity_name": (
        "activity_name",
        "activityname",
        "activity",
        "činnost",
        "task_name",
        "taskname",
        "task",
        "úkol",
    ),
    "date": ("date", "day", "start_at", "startat", "datum"),
    "hours": ("hours", "duration", "time", "hours_tracked", "natrackováno"),
    "description": ("description", "note", "notes", "comment", "comments", "popis"),
    "approved": ("approved", "is_approved", "status", "schváleno"),
    "billable": ("billable", "is_billable", "billing", "placené"),
}


def normalize_header(header: str) -> str:
    """
    Normalize a column name: strip accents, lowercase, collapse separators to ``_``.
    """

    decomposed = unicodedata.normalize("NFKD", str(header))
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    lowered = ascii_only.strip().lower()
    return re.sub(r"[^a-z0-9]+", "_", lowered).strip("_")


@dataclass(frozen=True)
class MappingResolution:
    """
    Final resolved mapping metadata.
    """

    canonical_to_source: dict[str, str]
    source_headers: tuple[str, ...]
    match_strategies: dict[str, str]


class SchemaMapper:
    """
    Resolves source timesheet headers into canonical field mappings.
    """

    def __init__(
        self,
        *,
        aliases: Mapping[str, Sequence[str]] | None = None,
        validator: MappingValidator | None = None,
    ) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {
            canonical: tuple(values)
            for canonical, values in (aliases or DEFAULT_COLUMN_ALIASES).items()
        }
        self._validator = validator or MappingValidator(
            required_fields=REQUIRED_CANONICAL_FIELDS,
            canonical_fields=CANONICAL_FIELDS,
        )

    def resolve_mapping(
        self,
        headers: Sequence[Any],
        *,
        manual_overrides: Mapping[str, str] | None = None,
    ) -> MappingResolution:
        """
        Resolve canonical-to-source mapping from headers and optional overrides.

        Overrides win; every other field binds the first alias (in priority
        order) present among the headers and not already claimed by another field.
        """

        source_headers = tuple(
            str(header) for header in headers if header is not None and str(header).strip()
        )
        if not source_headers:
            raise SchemaMappingError(
                message="File headers are empty; cannot resolve column mapping.",
                errors=[
                    MappingErrorDetail(
                        code=MappingErrorCode.EMPTY_HEADERS,
                        message="No headers were found in the file.",
                    )
                ],
            )

        normalized_header_lookup: dict[str, str] = {}
        for header in source_headers:
            normalized = normalize_header(header)
            if normalized and normalized not in normalized_header_lookup:
                normalized_header_lookup[normalized] = header

        resolved: dict[str, str] = {}
        strategies: dict[str, str] = {}
        mapping_errors: list[MappingErrorDetail] = []

        for canonical_field, source_column in (manual_overrides or {}).items():
            normalized_canonical = canonical_field.strip()
            if normalized_canonical not in CANONICAL_FIELDS:
                mapping_errors.append(
                    MappingErrorDetail(
                        code=MappingErrorCode.INVALID_OVERRIDE_FIELD,
                        message="Manual override contains unknown canonical field.",
                        canonical_field=normalized_canonical,
                        source_column=source_column,
                    )
                )
                continue

            matched_source = normalized_header_lookup.get(normalize_header(source_column))
            if matched_source is None:
                mapping_errors.append(
                    MappingErrorDetail(
                        code=MappingErrorCode.OVERRIDE_SOURCE_NOT_FOUND,
                        message="Manual override points to a column not present in the file headers.",
                        canonical_field=normalized_canonical,
                        source_column=source_column,
                        context={"source_headers": list(source_headers)},
                    )
                )
                continue

            resolved[normalized_canonical] = matched_source
            strategies[normalized_canonical] = "override"

        used_headers = set(resolved.values())
        for canonical_field in CANONICAL_FIELDS:
            if canonical_field in resolved:
                continue

            match = self._find_alias_match(
                canonical_field=canonical_field,
                normalized_header_lookup=normalized_header_lookup,
                used_headers=used_headers,
            )
            if match is not None:
                resolved[canonical_field] = match
                strategies[canonical_field] = "alias"
                used_headers.add(match)

        self._validator.validate(
            mapping=resolved,
            source_headers=source_headers,
            pre_errors=mapping_errors,
        )

        return MappingResolution(
            canonical_to_source=resolved,
            source_headers=source_headers,
            match_strategies=strategies,
        )

    def map_row(
        self,
        *,
        raw_row: Mapping[str, Any],
        mapping: MappingResolution,
    ) -> dict[str, Any]:
        """
        Map one raw source row into canonical raw field values.
        """

        return {
            canonical_field: raw_row.get(source_column)
            for canonical_field, source_column in mapping.canonical_to_source.items()
        }

    def _find_alias_match(
        self,
        *,
        canonical_field: str,
        normalized_header_lookup: Mapping[str, str],
        used_headers: set[str],
    ) -> str | None:
        for candidate in self._aliases.get(canonical_field, (canonical_field,)):
            match = normalized_header_lookup.get(normalize_header(candidate))
            if match and match not in used_headers:
                return match
        return None
