"""
app/readers package marker.
"""

from app.readers.tabular_reader import RawSheet, TabularReadError, read_csv, read_tabular, read_workbook

__all__ = [
    "RawSheet",
    "TabularReadError",
    "read_csv",
    "read_tabular",
    "read_workbook",
]
