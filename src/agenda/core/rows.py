"""Row model - event entries, day headers and the materialized row list."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator

from agenda.errors import OutOfRangeError


@dataclass(frozen=True)
class CalendarEvent:
    """Display payload for a calendar occurrence."""

    title: str
    end: datetime | None = None
    location: str = ""
    calendar: str = ""


@dataclass(frozen=True)
class EventEntry:
    """One calendar occurrence, as produced by an event source."""

    start: datetime
    payload: Any
    kind: str
    all_day: bool = False

    is_header = False


@dataclass(frozen=True)
class DayHeader:
    """Synthetic row marking the first row of a calendar day."""

    day_start: datetime
    is_today: bool = False
    is_tomorrow: bool = False

    is_header = True


Row = EventEntry | DayHeader


@dataclass(frozen=True)
class RowList:
    """
    Immutable snapshot of rows, headers interleaved with events.

    Positions are the row identity for the lifetime of one snapshot.
    """

    rows: tuple[Row, ...] = ()
    skipped: int = 0
    built_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def empty(cls) -> "RowList":
        return cls()

    def count(self) -> int:
        return len(self.rows)

    def row_at(self, index: int) -> Row:
        """Return the row at index. Negative indices do not wrap."""
        self._check(index)
        return self.rows[index]

    def stable_id(self, index: int) -> int:
        self._check(index)
        return index

    def headers(self) -> Iterator[DayHeader]:
        return (row for row in self.rows if row.is_header)

    def events(self) -> Iterator[EventEntry]:
        return (row for row in self.rows if not row.is_header)

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self.rows):
            raise OutOfRangeError(index, len(self.rows))
