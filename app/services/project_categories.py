"""
app/services/project_categories.py

Maps exporter project names to internal project category buckets.

Names follow ``[Design tým ]<Bucket>[_<year>][ 🙌]``; for example
``"Design tým OPS_2025"`` -> ``OPS`` and ``"UX Maturity_2025 🙌"`` -> ``UX Maturity``.
"""

from __future__ import annotations

import re
import unicodedata


class ProjectCategory:
    OPS = "OPS"
    INTERNAL = "Internal"
    RND = "R&D"
    GUIDING = "Guiding"
    PR = "PR"
    UX_MATURITY = "UX Maturity"
    OTHER = "Other"


PROJECT_CATEGORIES: tuple[str, ...] = (
    ProjectCategory.OPS,
    ProjectCategory.INTERNAL,
    ProjectCategory.RND,
    ProjectCategory.GUIDING,
    ProjectCategory.PR,
    ProjectCategory.UX_MATURITY,
    ProjectCategory.OTHER,
)

# Bucket names as they appear in project names, compared without accents.
_BUCKET_NAMES: dict[str, str] = {
    "ops": ProjectCategory.OPS,
    "interni": ProjectCategory.INTERNAL,
    "r&d": ProjectCategory.RND,
    "guiding": ProjectCategory.GUIDING,
    "pr": ProjectCategory.PR,
    "ux maturity": ProjectCategory.UX_MATURITY,
}

_PROJECT_NAME_PATTERN = re.compile(
    r"^(?:design tym\s+)?(?P<bucket>.+?)(?:_(?P<year>\d{4}))?(?:\s*\U0001F64C)?$"
)
_YEAR_SUFFIX_PATTERN = re.compile(r"_(\d{4})(?:\s*\U0001F64C)?$")


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.split()).casefold()


def map_project_category(project_name: str | None) -> str:
    """
    Return the category bucket of a project name, ``Other`` when unknown.
    """

    if not project_name:
        return ProjectCategory.OTHER
    match = _PROJECT_NAME_PATTERN.match(_fold(project_name))
    if match is None:
        return ProjectCategory.OTHER
    return _BUCKET_NAMES.get(match.group("bucket").strip(), ProjectCategory.OTHER)


def extract_project_year(project_name: str | None) -> int | None:
    """
    Year suffix of a project name (``"OPS_2025"`` -> 2025), or None.
    """

    if not project_name:
        return None
    match = _YEAR_SUFFIX_PATTERN.search(project_name.strip())
    return int(match.group(1)) if match else None


def is_guiding_project(project_name: str | None) -> bool:
    return bool(project_name) and "guiding" in str(project_name).casefold()
