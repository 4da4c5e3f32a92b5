"""
List, inspect or delete timesheet upload batches.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict

from app.domain.stores import EntryStoreError, UploadHistoryError
from app.domain.timesheet import EntryFilter
from app.logging_utils import json_default
from app.repositories.timesheet_entry_repository import TimesheetEntryRepository
from app.repositories.upload_history_repository import UploadHistoryRepository
from app.schemas.timesheet_upload import UploadBatchResponse
from db.session import session_scope


def main() -> int:
    parser = argparse.ArgumentParser(description="Inspect timesheet upload history.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    list_parser = subcommands.add_parser("list", help="Show the most recent upload batches.")
    list_parser.add_argument("--limit", type=int, default=10, help="Number of batches to show (default: 10).")

    entries_parser = subcommands.add_parser("entries", help="Show the entries stored by a batch.")
    entries_parser.add_argument("batch_id", help="Upload batch id.")

    delete_parser = subcommands.add_parser("delete", help="Delete a batch together with its entries.")
    delete_parser.add_argument("batch_id", help="Upload batch id.")

    args = parser.parse_args()

    with session_scope() as db:
        if args.command == "list":
            batches = UploadHistoryRepository(db).list_recent(limit=args.limit)
            payload = [UploadBatchResponse.from_domain(batch).model_dump(mode="json") for batch in batches]
            print(json.dumps(payload, indent=2, ensure_ascii=False))
            return 0

        if args.command == "entries":
            try:
                entries = TimesheetEntryRepository(db, commit=False).list_entries(
                    EntryFilter(upload_id=args.batch_id)
                )
            except (EntryStoreError, ValueError) as exc:
                print(json.dumps({"message": str(exc)}, indent=2))
                return 1
            rows = [asdict(entry) for entry in entries]
            print(json.dumps(rows, indent=2, ensure_ascii=False, default=json_default))
            return 0

        try:
            UploadHistoryRepository(db).delete_batch(args.batch_id)
        except UploadHistoryError as exc:
            print(json.dumps({"message": str(exc)}, indent=2))
            return 1

    print(json.dumps({"deleted": args.batch_id}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
