"""
Fill the public holiday table from the official holiday calendar.

Re-running for the same years is safe; existing dates keep one row and take
the current holiday name.
"""

from __future__ import annotations

import argparse
import json

from app.domain.stores import EntryStoreError
from app.repositories.holiday_repository import HolidayRepository
from app.services.working_days import DEFAULT_COUNTRY_CODE, country_holiday_calendar
from db.session import session_scope


def main() -> int:
    parser = argparse.ArgumentParser(description="Load public holidays into the database.")
    parser.add_argument(
        "--year",
        type=int,
        action="append",
        required=True,
        help="Calendar year to load; repeat for several years.",
    )
    parser.add_argument(
        "--country",
        default=DEFAULT_COUNTRY_CODE,
        help=f"ISO 3166-1 alpha-2 country code (default: {DEFAULT_COUNTRY_CODE}).",
    )
    args = parser.parse_args()

    country_code = args.country.upper()
    try:
        calendar = country_holiday_calendar(args.year, country_code)
    except NotImplementedError:
        print(json.dumps({"message": f"No holiday calendar for country {country_code!r}."}, indent=2))
        return 2

    with session_scope() as db:
        try:
            saved = HolidayRepository(db, country_code=country_code).save_calendar(calendar)
        except EntryStoreError as exc:
            print(json.dumps({"message": str(exc)}, indent=2))
            return 1

    payload = {
        "country_code": country_code,
        "years": sorted(set(args.year)),
        "holidays_saved": saved,
        "holidays": {day.isoformat(): name for day, name in sorted(calendar.holidays.items())},
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
