"""
app/services package marker.

Only the pure calculation services are re-exported here; the session-backed
``analytics_service`` and ``timesheet_upload_service`` import repositories and
are imported from their modules directly.
"""

from app.services.activity_categorizer import (
    CategorizationResult,
    KeywordRule,
    KeywordRuleSet,
    activity_summary,
    categorize_entries,
)
from app.services.deduplication import CleanupReport, DuplicateCleanupService, partition_duplicates
from app.services.fte_service import (
    PersonFTE,
    PlannedFTEHistory,
    PlannedFTERecord,
    calculate_fte,
    fte_stats,
    monthly_fte,
)
from app.services.metrics_service import MetricsSnapshot, build_snapshot
from app.services.project_categories import map_project_category
from app.services.timesheet_import_service import TimesheetImportService
from app.services.timesheet_parser import TimesheetParser, TimesheetSchemaMappingError, TimesheetStructureError
from app.services.working_days import HolidayCalendar, calculate_working_days, working_hours_for_period

__all__ = [
    "CategorizationResult",
    "CleanupReport",
    "DuplicateCleanupService",
    "HolidayCalendar",
    "KeywordRule",
    "KeywordRuleSet",
    "MetricsSnapshot",
    "PersonFTE",
    "PlannedFTEHistory",
    "PlannedFTERecord",
    "TimesheetImportService",
    "TimesheetParser",
    "TimesheetSchemaMappingError",
    "TimesheetStructureError",
    "activity_summary",
    "build_snapshot",
    "calculate_fte",
    "calculate_working_days",
    "categorize_entries",
    "fte_stats",
    "map_project_category",
    "monthly_fte",
    "partition_duplicates",
    "working_hours_for_period",
]
