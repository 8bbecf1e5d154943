"""Shared fixtures."""

from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from agenda.core.days import DayCalculator
from agenda.core.rows import CalendarEvent, EventEntry

TORONTO = ZoneInfo("America/Toronto")


@pytest.fixture
def zone():
    return TORONTO


@pytest.fixture
def now(zone):
    return datetime(2025, 1, 15, 12, 0, tzinfo=zone)


@pytest.fixture
def calculator(zone):
    return DayCalculator(zone)


@pytest.fixture
def make_entry(now, zone):
    """Factory for entries at an hour, N days from `now`'s date."""

    def _make(
        title: str,
        hour: int,
        day_offset: int = 0,
        kind: str = "test",
        all_day: bool = False,
    ) -> EventEntry:
        day = now.date() + timedelta(days=day_offset)
        return EventEntry(
            start=datetime.combine(day, time(hour, 0), tzinfo=zone),
            payload=CalendarEvent(title=title, calendar="Test"),
            kind=kind,
            all_day=all_day,
        )

    return _make
