"""
Import one timesheet export (CSV, XLSX or XLS) from the command line.

Exit codes: 0 completed, 1 partial or failed import, 2 rejected file.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from app.schemas.timesheet_upload import (
    RowValidationErrorResponse,
    UploadBatchResponse,
    ValidationRejectionResponse,
)
from app.services.timesheet_parser import TimesheetSchemaMappingError, TimesheetStructureError
from app.services.timesheet_upload_service import (
    EmptyTimesheetError,
    TimesheetValidationFailedError,
    build_timesheet_upload_service,
)
from db.session import session_scope


def _parse_overrides(values: list[str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for value in values:
        if "=" not in value:
            raise argparse.ArgumentTypeError(f"Expected canonical_field=Source Column, got {value!r}.")
        field_name, column = value.split("=", 1)
        overrides[field_name.strip()] = column.strip()
    return overrides


def main() -> int:
    parser = argparse.ArgumentParser(description="Import a timesheet export into the database.")
    parser.add_argument("path", type=Path, help="CSV, XLSX or XLS file to import.")
    parser.add_argument("--uploaded-by-email", required=True, help="Email recorded on the upload batch.")
    parser.add_argument("--uploaded-by-name", default=None, help="Optional display name of the uploader.")
    parser.add_argument(
        "--map",
        dest="mappings",
        action="append",
        default=[],
        metavar="FIELD=COLUMN",
        help="Manual header mapping, e.g. --map hours='Tracked time'. Repeatable.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        overrides = _parse_overrides(args.mappings)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    data = args.path.read_bytes()
    with session_scope() as db:
        service = build_timesheet_upload_service(db)
        try:
            batch = service.upload(
                data,
                filename=args.path.name,
                uploaded_by_email=args.uploaded_by_email,
                uploaded_by_name=args.uploaded_by_name,
                manual_overrides=overrides or None,
            )
        except TimesheetValidationFailedError as exc:
            rejection = ValidationRejectionResponse(
                message=str(exc),
                total_rows=exc.total_rows,
                valid_rows=exc.valid_rows,
                total_errors=exc.total_errors,
                validation_errors=[RowValidationErrorResponse.from_domain(error) for error in exc.preview],
            )
            print(rejection.model_dump_json(indent=2))
            return 2
        except TimesheetSchemaMappingError as exc:
            print(json.dumps(exc.to_dict(), indent=2, ensure_ascii=False))
            return 2
        except (TimesheetStructureError, EmptyTimesheetError) as exc:
            print(json.dumps({"message": str(exc)}, indent=2, ensure_ascii=False))
            return 2

    response = UploadBatchResponse.from_domain(batch)
    print(response.model_dump_json(indent=2))
    return 0 if batch.status == "completed" else 1


if __name__ == "__main__":
    raise SystemExit(main())
