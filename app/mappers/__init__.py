"""
app/mappers package marker.
"""

from app.mappers.schema_mapper import (
    CANONICAL_FIELDS,
    DEFAULT_COLUMN_ALIASES,
    REQUIRED_CANONICAL_FIELDS,
    MappingResolution,
    SchemaMapper,
    normalize_header,
)

__all__ = [
    "CANONICAL_FIELDS",
    "DEFAULT_COLUMN_ALIASES",
    "REQUIRED_CANONICAL_FIELDS",
    "MappingResolution",
    "SchemaMapper",
    "normalize_header",
]
