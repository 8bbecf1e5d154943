"""Event merging and day bucketing - pure, no I/O dependencies."""

import logging
from dataclasses import replace
from datetime import datetime
from itertools import chain
from typing import Any, Callable, Iterable, Sequence

from agenda.errors import ClassificationError

from .days import DayCalculator
from .rows import DayHeader, EventEntry, Row, RowList

logger = logging.getLogger(__name__)

# An entry paired with the start of its day in the reference zone
Classified = tuple[EventEntry, datetime]


def merge_entries(
    streams: Iterable[Sequence[Any]],
    cross_source_sort: bool = True,
    key: Callable[[Any], datetime] = lambda e: e.start,
) -> list:
    """
    Merge per-source entry sequences into one.

    Each source is sorted by start on its own, but sources are not
    ordered relative to each other. With cross_source_sort the result is
    a stable sort by start instant; without it the sources are simply
    concatenated in the order given.
    """
    entries = list(chain.from_iterable(streams))
    if cross_source_sort:
        entries.sort(key=key)
    return entries


def classify_entries(
    entries: Iterable[EventEntry],
    calculator: DayCalculator,
) -> tuple[list[Classified], int]:
    """
    Place each entry on its day. Returns (classified, skipped).

    This is the only place entries are dropped: an entry whose start
    can't be placed on a day is logged and counted. Timed starts come
    back expressed in the reference zone; all-day starts were already
    normalized by their source and are left alone.
    """
    classified = []
    skipped = 0
    for entry in entries:
        try:
            day_start = calculator.day_start(entry.start)
        except ClassificationError as e:
            logger.warning(f"Skipping {entry.kind} entry: {e}")
            skipped += 1
            continue
        if not entry.all_day:
            entry = replace(entry, start=calculator.localize(entry.start))
        classified.append((entry, day_start))
    return classified, skipped


def _check_now(calculator: DayCalculator, now: datetime) -> None:
    # A bad clock is the caller's fault, not the entries'; let it raise
    calculator.day_start(now)


def _header_rows(classified: Iterable[Classified], calculator: DayCalculator, now: datetime) -> tuple[Row, ...]:
    rows: list[Row] = []
    current_day = None

    for entry, day_start in classified:
        if day_start.date() != current_day:
            info = calculator.classify(day_start, now)
            rows.append(
                DayHeader(
                    day_start=day_start,
                    is_today=info.is_today,
                    is_tomorrow=info.is_tomorrow,
                )
            )
            current_day = day_start.date()
        rows.append(entry)

    return tuple(rows)


def insert_day_headers(
    entries: Sequence[EventEntry],
    calculator: DayCalculator,
    now: datetime,
) -> RowList:
    """
    Walk entries in order, inserting a DayHeader at every day change.

    Headers are only emitted in front of an event, so no day without
    events gets one. Unclassifiable entries are skipped and counted in
    RowList.skipped; a naive `now` raises ClassificationError.
    """
    _check_now(calculator, now)
    classified, skipped = classify_entries(entries, calculator)
    return RowList(rows=_header_rows(classified, calculator, now), skipped=skipped)


def build_rows(
    streams: Iterable[Sequence[EventEntry]],
    calculator: DayCalculator,
    now: datetime,
    cross_source_sort: bool = True,
) -> RowList:
    """
    Full pipeline: classify, merge, insert headers.

    Entries are classified before merging so the sort never has to
    compare a naive datetime with an aware one, and each entry's day is
    computed once.
    """
    _check_now(calculator, now)
    classified, skipped = classify_entries(chain.from_iterable(streams), calculator)
    merged = merge_entries([classified], cross_source_sort=cross_source_sort, key=lambda c: c[0].start)
    return RowList(rows=_header_rows(merged, calculator, now), skipped=skipped)
