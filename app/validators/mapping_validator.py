"""
app/validators/mapping_validator.py

Checks a resolved canonical-field -> source-header mapping before any row is
read. Every problem is collected as a ``MappingErrorDetail`` so that callers
can show all of them at once.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Mapping, Sequence


class MappingErrorCode:
    EMPTY_HEADERS = "empty_headers"
    INVALID_OVERRIDE_FIELD = "invalid_override_field"
    OVERRIDE_SOURCE_NOT_FOUND = "override_source_not_found"
    INVALID_CANONICAL_FIELD = "invalid_canonical_field"
    UNKNOWN_SOURCE_COLUMN = "unknown_source_column"
    SOURCE_COLUMN_REUSED = "source_column_reused"
    REQUIRED_FIELD_UNMAPPED = "required_field_unmapped"


@dataclass(frozen=True)
class MappingErrorDetail:
    code: str
    message: str
    canonical_field: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "canonical_field": self.canonical_field,
            "source_column": self.source_column,
            "context": self.context,
        }


def missing_required_fields(errors: Sequence[MappingErrorDetail]) -> list[str]:
    """Canonical fields reported as unmapped, in report order."""

    return [
        error.canonical_field
        for error in errors
        if error.code == MappingErrorCode.REQUIRED_FIELD_UNMAPPED and error.canonical_field
    ]


class SchemaMappingError(ValueError):
    """
    Raised when the file headers cannot be bound to the timesheet fields.
    """

    def __init__(self, *, message: str, errors: Sequence[MappingErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    @property
    def missing_fields(self) -> list[str]:
        return missing_required_fields(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "errors": [error.to_dict() for error in self.errors]}


class MappingValidator:
    def __init__(
        self,
        *,
        required_fields: Sequence[str],
        canonical_fields: Sequence[str],
    ) -> None:
        self._required_fields = tuple(required_fields)
        self._canonical_fields = frozenset(canonical_fields)

    def validate(
        self,
        *,
        mapping: Mapping[str, str],
        source_headers: Sequence[str],
        pre_errors: Sequence[MappingErrorDetail] | None = None,
    ) -> None:
        """
        Raise ``SchemaMappingError`` listing ``pre_errors`` plus every problem
        found in ``mapping``; return silently when there are none.
        """

        errors = list(pre_errors or ())
        errors.extend(self._check_bindings(mapping, frozenset(source_headers)))
        errors.extend(self._check_reuse(mapping))
        errors.extend(self._check_required(mapping, source_headers))
        if not errors:
            return

        missing = ", ".join(sorted(set(missing_required_fields(errors)))) or "none"
        raise SchemaMappingError(
            message=f"Header mapping validation failed. Missing required fields: {missing}.",
            errors=errors,
        )

    def _check_bindings(
        self,
        mapping: Mapping[str, str],
        headers: frozenset[str],
    ) -> list[MappingErrorDetail]:
        errors: list[MappingErrorDetail] = []
        for canonical_field, source_column in mapping.items():
            if canonical_field not in self._canonical_fields:
                errors.append(
                    MappingErrorDetail(
                        code=MappingErrorCode.INVALID_CANONICAL_FIELD,
                        message=f"{canonical_field!r} is not a timesheet field.",
                        canonical_field=canonical_field,
                        source_column=source_column,
                    )
                )
            if source_column not in headers:
                errors.append(
                    MappingErrorDetail(
                        code=MappingErrorCode.UNKNOWN_SOURCE_COLUMN,
                        message=f"Column {source_column!r} is not present in the file.",
                        canonical_field=canonical_field,
                        source_column=source_column,
                    )
                )
        return errors

    @staticmethod
    def _check_reuse(mapping: Mapping[str, str]) -> list[MappingErrorDetail]:
        usage = Counter(mapping.values())
        return [
            MappingErrorDetail(
                code=MappingErrorCode.SOURCE_COLUMN_REUSED,
                message=f"Column {source_column!r} is bound to {usage[source_column]} fields.",
                canonical_field=canonical_field,
                source_column=source_column,
            )
            for canonical_field, source_column in mapping.items()
            if usage[source_column] > 1
        ]

    def _check_required(
        self,
        mapping: Mapping[str, str],
        source_headers: Sequence[str],
    ) -> list[MappingErrorDetail]:
        return [
            MappingErrorDetail(
                code=MappingErrorCode.REQUIRED_FIELD_UNMAPPED,
                message=f"No column found for required field {required!r}.",
                canonical_field=required,
                context={"source_headers": list(source_headers)},
            )
            for required in self._required_fields
            if required not in mapping
        ]
