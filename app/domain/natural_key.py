"""
app/domain/natural_key.py

Normalized natural key used to detect duplicate time entries.

Every text component is trimmed, internal whitespace is collapsed and the
result is case-folded, so ``" Design  Review "`` and ``"design review"``
produce the same key. Hours are rendered with four fixed decimals.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

_SEPARATOR = "\x1f"


class _KeyedEntry(Protocol):
    person_name: str
    date: date
    project_name: str
    activity_name: str
    description: str | None
    hours: float


def normalize_key_text(value: Any) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split()).casefold()


def normalize_key_hours(value: Any) -> str:
    return f"{round(float(value), 4):.4f}"


@dataclass(frozen=True, order=True)
class NaturalKey:
    person: str
    date: str
    project: str
    activity: str
    description: str
    hours: str

    @classmethod
    def of(cls, entry: _KeyedEntry) -> "NaturalKey":
        return cls(
            person=normalize_key_text(entry.person_name),
            date=entry.date.isoformat(),
            project=normalize_key_text(entry.project_name),
            activity=normalize_key_text(entry.activity_name),
            description=normalize_key_text(entry.description),
            hours=normalize_key_hours(entry.hours),
        )

    def digest(self) -> str:
        """
        Stable SHA-256 hex digest stored in the entry store's unique column.
        """

        raw = _SEPARATOR.join(
            (self.person, self.date, self.project, self.activity, self.description, self.hours)
        )
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()
