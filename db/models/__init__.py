"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.activity_keyword import ActivityKeyword
from db.models.planned_fte import PlannedFTE
from db.models.public_holiday import PublicHoliday
from db.models.timesheet_entry import TimesheetEntry
from db.models.upload_history import UploadHistory

__all__ = [
    "ActivityKeyword",
    "PlannedFTE",
    "PublicHoliday",
    "TimesheetEntry",
    "UploadHistory",
]
