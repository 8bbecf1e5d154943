"""Day boundary logic - pure, no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from agenda.errors import ClassificationError, ConfigError

LOCAL_ZONE = "local"


@dataclass(frozen=True)
class DayInfo:
    """Classification of an instant's calendar day."""

    day_start: datetime
    is_today: bool
    is_tomorrow: bool


def resolve_zone(name: str | None) -> tzinfo | None:
    """
    Resolve a configured zone name.

    "local" (or empty) means the device zone, returned as None and
    looked up at classification time. Anything else must be an IANA name.
    """
    if not name or name.strip().lower() == LOCAL_ZONE:
        return None
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Unknown time zone: {name!r}") from e


def normalize_all_day(start: datetime, zone: tzinfo | None) -> datetime:
    """
    Re-anchor an all-day start to midnight in the reference zone.

    All-day starts are often stored as midnight UTC; converting them
    would move them onto the previous day west of Greenwich. The stored
    calendar date is kept as-is. Call once, at ingestion.
    """
    if zone is None:
        return datetime.combine(start.date(), time(0, 0)).astimezone()
    return datetime.combine(start.date(), time(0, 0), tzinfo=zone)


class DayCalculator:
    """
    Classifies instants into calendar days of one reference zone.

    Pure - the current moment is always passed in. With zone=None the
    device's local zone is used.
    """

    def __init__(self, zone: tzinfo | None = None):
        self.zone = zone

    def day_start(self, instant: datetime) -> datetime:
        """Truncate an aware instant to midnight in the reference zone."""
        if not isinstance(instant, datetime):
            raise ClassificationError(f"Not a datetime: {instant!r}")
        if instant.tzinfo is None or instant.utcoffset() is None:
            raise ClassificationError(f"Naive datetime has no zone: {instant.isoformat()}")
        local = instant.astimezone(self.zone)
        if self.zone is None:
            # Device zone: let astimezone() pick midnight's own UTC offset
            return datetime.combine(local.date(), time(0, 0)).astimezone()
        return datetime.combine(local.date(), time(0, 0), tzinfo=self.zone)

    def localize(self, instant: datetime) -> datetime:
        """Express an aware instant in the reference zone."""
        return instant.astimezone(self.zone)

    def classify(self, instant: datetime, now: datetime) -> DayInfo:
        start = self.day_start(instant)
        today = self.day_start(now).date()
        day = start.date()
        return DayInfo(
            day_start=start,
            is_today=day == today,
            is_tomorrow=day == today + timedelta(days=1),
        )
