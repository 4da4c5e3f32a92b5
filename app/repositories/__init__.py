"""
app/repositories package marker.
"""

from app.repositories.activity_keyword_repository import ActivityKeywordRepository
from app.repositories.holiday_repository import HolidayRepository
from app.repositories.planned_fte_repository import PlannedFTERepository
from app.repositories.timesheet_entry_repository import TimesheetEntryRepository
from app.repositories.upload_history_repository import UploadHistoryRepository

__all__ = [
    "ActivityKeywordRepository",
    "HolidayRepository",
    "PlannedFTERepository",
    "TimesheetEntryRepository",
    "UploadHistoryRepository",
]
