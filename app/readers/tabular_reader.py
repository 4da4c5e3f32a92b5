"""
app/readers/tabular_reader.py

Readers that turn uploaded CSV or workbook bytes into raw header/row sheets.

Rows keep their 1-based position among the data rows of the sheet, blank
rows included, so that error row numbers point at the source file.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from app.domain.upload import FileType

logger = logging.getLogger(__name__)

CSV_DELIMITERS = ",;\t"
_SNIFF_SAMPLE_SIZE = 8192

_EXCEL_ENGINES: dict[str, str] = {
    FileType.XLSX: "openpyxl",
    FileType.XLS: "xlrd",
}


class TabularReadError(ValueError):
    """
    Raised when an uploaded file cannot be decoded into rows.
    """


@dataclass(frozen=True)
class RawSheet:
    """
    One sheet of raw cells: ordered headers and ``(row_number, row)`` pairs.
    """

    name: str | None
    headers: tuple[str, ...]
    rows: list[tuple[int, dict[str, Any]]] = field(default_factory=list)


def read_tabular(data: bytes, *, file_type: str) -> list[RawSheet]:
    """
    Read CSV or workbook bytes into one or more raw sheets.
    """

    normalized_type = (file_type or "").strip().lower().lstrip(".")
    if normalized_type == FileType.CSV:
        return [read_csv(data)]
    if normalized_type in _EXCEL_ENGINES:
        return read_workbook(data, file_type=normalized_type)
    raise TabularReadError(f"Unsupported file type: {file_type!r}.")


def read_csv(data: bytes) -> RawSheet:
    """
    Decode UTF-8 CSV bytes, sniffing ``,``, ``;`` or tab as the delimiter.
    """

    text_stream = io.TextIOWrapper(io.BytesIO(data), encoding="utf-8-sig", newline="")
    try:
        sample = text_stream.read(_SNIFF_SAMPLE_SIZE)
        text_stream.seek(0)
        delimiter = _sniff_delimiter(sample)

        reader = csv.reader(text_stream, delimiter=delimiter)
        header_row = next(reader, None)
        if header_row is None:
            raise TabularReadError("CSV header row is missing.")
        headers = tuple(header.strip() for header in header_row)

        rows: list[tuple[int, dict[str, Any]]] = []
        for row_number, values in enumerate(reader, start=1):
            row = {
                header: (values[index] if index < len(values) else None)
                for index, header in enumerate(headers)
                if header
            }
            rows.append((row_number, row))
    except UnicodeDecodeError as exc:
        raise TabularReadError("CSV must be UTF-8 encoded.") from exc
    except csv.Error as exc:
        raise TabularReadError(f"Invalid CSV format: {exc}") from exc
    finally:
        text_stream.detach()

    return RawSheet(name=None, headers=headers, rows=rows)


def read_workbook(data: bytes, *, file_type: str) -> list[RawSheet]:
    """
    Read every sheet of an ``.xlsx``/``.xls`` workbook in workbook order.

    Cells are read untyped (``dtype=object``); real date cells come back as
    timestamps and empty cells as ``None``.
    """

    engine = _EXCEL_ENGINES.get(file_type)
    if engine is None:
        raise TabularReadError(f"Unsupported workbook type: {file_type!r}.")

    try:
        frames = pd.read_excel(io.BytesIO(data), sheet_name=None, dtype=object, engine=engine)
    except (ValueError, OSError, KeyError) as exc:
        raise TabularReadError(f"Workbook could not be read: {exc}") from exc

    sheets: list[RawSheet] = []
    for sheet_name, frame in frames.items():
        headers = tuple(str(column).strip() for column in frame.columns)
        cleaned = frame.astype(object).where(pd.notna(frame), None)
        rows = [
            (row_number, dict(zip(headers, values)))
            for row_number, values in enumerate(cleaned.itertuples(index=False, name=None), start=1)
        ]
        sheets.append(RawSheet(name=str(sheet_name), headers=headers, rows=rows))
        logger.debug("Read workbook sheet %r with %d rows", sheet_name, len(rows))
    return sheets


def _sniff_delimiter(sample: str) -> str:
    if not sample:
        return ","
    try:
        return csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        return ","
