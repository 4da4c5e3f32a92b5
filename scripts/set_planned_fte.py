"""
Record a new planned FTE target for one person.

The person's open target, if any, is closed the day before --valid-from.
"""

from __future__ import annotations

import argparse
import json
from datetime import date

from app.domain.stores import PlannedFTEConflictError
from app.repositories.planned_fte_repository import PlannedFTERepository
from app.services.fte_service import InvalidFTEValueError, PlannedFTEOverlapError
from db.session import session_scope


def main() -> int:
    parser = argparse.ArgumentParser(description="Record a planned FTE target.")
    parser.add_argument("person_name", help="Person name exactly as it appears in timesheets.")
    parser.add_argument("fte_value", type=float, help="Target FTE between 0 and 2 in 0.05 steps.")
    parser.add_argument(
        "--valid-from",
        type=date.fromisoformat,
        default=date.today(),
        help="First day the target applies (YYYY-MM-DD, default: today).",
    )
    args = parser.parse_args()

    with session_scope() as db:
        repository = PlannedFTERepository(db)
        try:
            change = repository.record_target(
                person_name=args.person_name,
                fte_value=args.fte_value,
                valid_from=args.valid_from,
            )
        except (InvalidFTEValueError, PlannedFTEOverlapError, PlannedFTEConflictError) as exc:
            print(json.dumps({"message": str(exc)}, indent=2, ensure_ascii=False))
            return 2

    payload = {
        "person_name": change.new_record.person_name,
        "fte_value": change.new_record.fte_value,
        "valid_from": change.new_record.valid_from.isoformat(),
        "closed_previous_until": (
            change.closed_record.valid_to.isoformat()
            if change.closed_record is not None and change.closed_record.valid_to is not None
            else None
        ),
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
