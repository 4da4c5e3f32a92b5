"""
Remove duplicate timesheet entries, keeping the oldest of each natural key.

Run this before applying the natural-key unique constraint migration.
"""

from __future__ import annotations

import argparse
import json
import logging

from app.repositories.timesheet_entry_repository import TimesheetEntryRepository
from app.services.deduplication import DuplicateCleanupService
from db.session import session_scope


def main() -> int:
    parser = argparse.ArgumentParser(description="Delete duplicate timesheet entries.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report duplicate groups without deleting anything.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    with session_scope() as db:
        service = DuplicateCleanupService(entry_store=TimesheetEntryRepository(db))
        report = service.cleanup(dry_run=args.dry_run)

    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
