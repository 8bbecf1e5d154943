"""Functional core - pure row-building logic with no I/O."""

from .rows import CalendarEvent, EventEntry, DayHeader, Row, RowList
from .days import DayCalculator, DayInfo, normalize_all_day, resolve_zone
from .merge import merge_entries, classify_entries, insert_day_headers, build_rows

__all__ = [
    # Rows
    "CalendarEvent",
    "EventEntry",
    "DayHeader",
    "Row",
    "RowList",
    # Days
    "DayCalculator",
    "DayInfo",
    "normalize_all_day",
    "resolve_zone",
    # Merging
    "merge_entries",
    "classify_entries",
    "insert_day_headers",
    "build_rows",
]
