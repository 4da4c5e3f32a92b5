from __future__ import annotations

import unittest

from app.domain.upload import UploadStatus
from app.services.timesheet_import_service import TimesheetImportService
from app.services.timesheet_parser import TimesheetParser, TimesheetSchemaMappingError, TimesheetStructureError
from app.services.timesheet_upload_service import (
    EmptyTimesheetError,
    TimesheetUploadService,
    TimesheetValidationFailedError,
)
from tests.fakes import InMemoryEntryStore, InMemoryUploadStore

VALID_CSV = (
    "Person,Project,Activity,Date,Hours,Description\n"
    "Jana,OPS_2025,Hiring interviews,2025-11-03,2,Round one\n"
    "Jana,OPS_2025,Hiring interviews,2025-11-03,2,Round one\n"
    "Petr,Guiding_2025,Mentoring,2025-11-04,1.5,\n"
).encode("utf-8")


class TestTimesheetUploadService(unittest.TestCase):
    def setUp(self) -> None:
        self.entry_store = InMemoryEntryStore()
        self.upload_store = InMemoryUploadStore()
        self.service = TimesheetUploadService(
            import_service=TimesheetImportService(
                entry_store=self.entry_store,
                upload_store=self.upload_store,
            ),
            parser=TimesheetParser(log_validation_errors=False),
            max_reported_validation_errors=2,
            max_file_size_bytes=1024,
        )

    def _upload(self, data: bytes, filename: str = "november.csv"):
        return self.service.upload(data, filename=filename, uploaded_by_email="lead@example.com")

    def test_valid_file_is_imported(self) -> None:
        batch = self._upload(VALID_CSV)

        self.assertEqual(batch.status, UploadStatus.COMPLETED)
        self.assertEqual(batch.file_type, "csv")
        self.assertEqual(batch.total_rows, 3)
        self.assertEqual(batch.successful_rows, 2)
        self.assertEqual(batch.duplicate_in_batch_rows, 1)
        self.assertEqual(len(self.entry_store.entries), 2)
        self.assertEqual(len(self.upload_store.batches), 1)

    def test_any_row_error_rejects_the_whole_file(self) -> None:
        data = (
            "Person,Project,Activity,Date,Hours\n"
            "Jana,OPS_2025,Hiring,2025-11-03,2\n"
            "Jana,OPS_2025,Hiring,2025-11-04,-1\n"
            "Jana,OPS_2025,Hiring,bad,1\n"
            ",OPS_2025,Hiring,2025-11-05,1\n"
        ).encode("utf-8")

        with self.assertRaises(TimesheetValidationFailedError) as ctx:
            self._upload(data)

        error = ctx.exception
        self.assertEqual(error.total_rows, 4)
        self.assertEqual(error.valid_rows, 1)
        self.assertEqual(error.total_errors, 3)
        self.assertEqual([item.row_number for item in error.preview], [2, 3])
        self.assertEqual(len(error.to_dict()["validation_errors"]), 3)
        self.assertEqual(self.entry_store.entries, [])
        self.assertEqual(self.upload_store.batches, {})

    def test_header_only_file_is_empty(self) -> None:
        with self.assertRaises(EmptyTimesheetError):
            self._upload(b"Person,Project,Activity,Date,Hours\n")

    def test_missing_columns_raise_mapping_error(self) -> None:
        with self.assertRaises(TimesheetSchemaMappingError):
            self._upload(b"Person,Project\nJana,OPS\n")

    def test_unsupported_extension_is_rejected(self) -> None:
        with self.assertRaises(TimesheetStructureError) as ctx:
            self._upload(VALID_CSV, filename="november.pdf")

        self.assertIn("Unsupported file extension", str(ctx.exception))

    def test_oversized_file_is_rejected(self) -> None:
        with self.assertRaises(TimesheetStructureError) as ctx:
            self._upload(VALID_CSV + b"x" * 2048)

        self.assertIn("File too large", str(ctx.exception))
        self.assertEqual(self.upload_store.batches, {})

    def test_blank_uploader_email_is_rejected(self) -> None:
        with self.assertRaises(TimesheetStructureError):
            self.service.upload(VALID_CSV, filename="november.csv", uploaded_by_email="   ")


if __name__ == "__main__":
    unittest.main()
