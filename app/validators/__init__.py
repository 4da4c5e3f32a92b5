"""
app/validators package marker.
"""

from app.validators.mapping_validator import MappingErrorCode, MappingErrorDetail, MappingValidator, SchemaMappingError
from app.validators.row_validator import TimesheetRowValidator, parse_date_value

__all__ = [
    "MappingErrorCode",
    "MappingErrorDetail",
    "MappingValidator",
    "SchemaMappingError",
    "TimesheetRowValidator",
    "parse_date_value",
]
