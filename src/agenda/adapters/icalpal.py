"""icalPal adapter - subprocess wrapper for macOS Calendar."""

import json
import logging
import subprocess
from datetime import datetime, timezone, tzinfo

from agenda.core.days import normalize_all_day
from agenda.core.rows import CalendarEvent, EventEntry
from agenda.errors import SourceFetchError
from agenda.labels import format_event_line

logger = logging.getLogger(__name__)

KIND = "icalpal"


class IcalPalSource:
    """
    icalPal subprocess event source.

    Fetches events from macOS Calendar via the icalPal CLI tool.
    Implements the EventSource protocol.
    """

    name = "icalPal"

    def __init__(
        self,
        zone: tzinfo | None = None,
        days: int = 7,
        include_calendars: list[str] | None = None,
        exclude_calendars: list[str] | None = None,
        timeout: int = 30,
    ):
        self.zone = zone
        self.days = days
        self.include_calendars = include_calendars
        self.exclude_calendars = exclude_calendars
        self.timeout = timeout

    def supported_kind(self) -> str:
        return KIND

    def kind_count(self) -> int:
        return 1

    def render_row(self, entry: EventEntry) -> str:
        return format_event_line(entry)

    def fetch_entries(self) -> list[EventEntry]:
        """Fetch entries for the next N days."""
        command = "eventsToday" if self.days <= 1 else f"eventsToday+{self.days}"
        cmd = ["icalPal", command, "-o", "json"]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
            data = json.loads(result.stdout) if result.stdout.strip() else []
        except subprocess.CalledProcessError as e:
            logger.warning(f"icalPal command failed: {e}")
            raise SourceFetchError(self.name, f"command failed: {e}") from e
        except FileNotFoundError as e:
            logger.warning("icalPal not found - install with 'brew install icalpal'")
            raise SourceFetchError(self.name, "icalPal not found") from e
        except subprocess.TimeoutExpired as e:
            logger.warning(f"icalPal timed out after {self.timeout}s")
            raise SourceFetchError(self.name, f"timed out after {self.timeout}s") from e
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse icalPal output: {e}")
            raise SourceFetchError(self.name, f"unparseable output: {e}") from e

        return self._parse_entries(data)

    def _parse_entries(self, data: list[dict]) -> list[EventEntry]:
        """Parse icalPal JSON output into entries, sorted by start."""
        entries = []

        for item in data:
            cal_name = item.get("calendar", "")

            if self.include_calendars and cal_name not in self.include_calendars:
                continue
            if self.exclude_calendars and cal_name in self.exclude_calendars:
                continue

            try:
                entry = self._parse_entry(item)
            except (ValueError, KeyError, TypeError) as e:
                logger.debug(f"Skipping malformed event: {e}")
                continue
            if entry:
                entries.append(entry)

        return sorted(entries, key=lambda e: e.start)

    def _parse_time(self, raw: str) -> datetime:
        # Format: "2026-01-27 14:00:00 -0500"
        if len(raw) > 19:
            return datetime.strptime(raw, "%Y-%m-%d %H:%M:%S %z")
        return datetime.strptime(raw, "%Y-%m-%d %H:%M:%S").replace(tzinfo=self.zone)

    def _parse_entry(self, item: dict) -> EventEntry | None:
        """Parse a single entry from icalPal data."""
        is_all_day = item.get("all_day") == 1

        # sctime/ectime carry the correct dates for recurring events
        sctime = item.get("sctime", "")
        ectime = item.get("ectime", "")

        if sctime:
            start = self._parse_time(sctime)
        elif item.get("sseconds"):
            start = datetime.fromtimestamp(item["sseconds"], tz=timezone.utc)
        else:
            return None

        if ectime:
            end = self._parse_time(ectime)
        elif item.get("eseconds"):
            end = datetime.fromtimestamp(item["eseconds"], tz=timezone.utc)
        else:
            end = None

        if is_all_day:
            # Stored as "YYYY-MM-DD 00:00:00 +0000"
            start = normalize_all_day(start, self.zone)
            end = normalize_all_day(end, self.zone) if end else None
        else:
            start = start.astimezone(self.zone)
            end = end.astimezone(self.zone) if end else None

        return EventEntry(
            start=start,
            payload=CalendarEvent(
                title=item.get("title") or "Untitled",
                end=end,
                location=item.get("location") or item.get("address") or "",
                calendar=item.get("calendar", ""),
            ),
            kind=KIND,
            all_day=is_all_day,
        )
