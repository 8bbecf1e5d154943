"""gcalcli adapter - subprocess wrapper for Google Calendar."""

import logging
import subprocess
from datetime import datetime, timedelta, tzinfo

from agenda.core.days import normalize_all_day
from agenda.core.rows import CalendarEvent, EventEntry
from agenda.errors import SourceFetchError
from agenda.labels import format_event_line

logger = logging.getLogger(__name__)


class GcalcliSource:
    """
    gcalcli subprocess event source.

    Fetches events from Google Calendar via the gcalcli CLI tool.
    Supports multiple Google accounts via separate config folders; each
    account is its own source with its own row kind.
    """

    def __init__(
        self,
        zone: tzinfo | None = None,
        days: int = 7,
        config_folder: str | None = None,
        label: str | None = None,
        calendars: list[str] | None = None,
        timeout: int = 30,
    ):
        """
        Initialize the gcalcli source.

        Args:
            zone: Reference zone. gcalcli prints wall-clock times without
                  an offset, which are read in this zone.
            days: Number of days to fetch, starting today.
            config_folder: Path to gcalcli config folder (for multi-account support).
            label: Optional label to identify this account.
            calendars: Calendar names to include. If None, all calendars are fetched.
            timeout: Command timeout in seconds.
        """
        self.zone = zone
        self.days = days
        self.config_folder = config_folder
        self.label = label or (config_folder.rstrip("/").split("/")[-1] if config_folder else "Google")
        self.calendars = calendars
        self.timeout = timeout

    @property
    def name(self) -> str:
        return f"gcalcli ({self.label})"

    def supported_kind(self) -> str:
        return f"gcalcli:{self.label}"

    def kind_count(self) -> int:
        return 1

    def render_row(self, entry: EventEntry) -> str:
        return format_event_line(entry)

    def fetch_entries(self) -> list[EventEntry]:
        """Fetch entries for the next N days."""
        today = datetime.now(self.zone).date()
        end = today + timedelta(days=self.days)
        cmd = [
            "gcalcli",
            "agenda",
            today.isoformat(),
            end.isoformat(),
            "--tsv",
            "--details",
            "length",
        ]
        if self.config_folder:
            cmd.extend(["--config-folder", self.config_folder])
        if self.calendars:
            for cal in self.calendars:
                cmd.extend(["--calendar", cal])

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            logger.warning(f"gcalcli command failed: {e}")
            raise SourceFetchError(self.name, f"command failed: {e}") from e
        except FileNotFoundError as e:
            logger.warning("gcalcli not found - install with 'pip install gcalcli'")
            raise SourceFetchError(self.name, "gcalcli not found") from e
        except subprocess.TimeoutExpired as e:
            logger.warning(f"gcalcli timed out after {self.timeout}s")
            raise SourceFetchError(self.name, f"timed out after {self.timeout}s") from e

        return self._parse_output(result.stdout)

    def _parse_output(self, output: str) -> list[EventEntry]:
        """Parse gcalcli TSV output into entries, sorted by start."""
        entries = []
        lines = output.strip().split("\n")

        # Skip header line
        for line in lines[1:]:
            if not line:
                continue

            parts = line.split("\t")
            if len(parts) < 5:
                continue

            try:
                entries.append(self._parse_line(parts))
            except ValueError as e:
                logger.debug(f"Skipping malformed gcalcli line: {e}")
                continue

        return sorted(entries, key=lambda e: e.start)

    def _parse_line(self, parts: list[str]) -> EventEntry:
        # No start time means an all-day event
        all_day = not parts[1]
        if all_day:
            start = normalize_all_day(datetime.fromisoformat(parts[0]), self.zone)
            end = normalize_all_day(datetime.fromisoformat(parts[2]), self.zone) if parts[2] else None
        else:
            start = self._localize(datetime.fromisoformat(f"{parts[0]}T{parts[1]}"))
            end = None
            if parts[2] and parts[3]:
                end = self._localize(datetime.fromisoformat(f"{parts[2]}T{parts[3]}"))

        return EventEntry(
            start=start,
            payload=CalendarEvent(
                title=parts[4] or "Untitled",
                end=end,
                location=parts[5] if len(parts) > 5 else "",
                calendar=self.label,
            ),
            kind=self.supported_kind(),
            all_day=all_day,
        )

    def _localize(self, naive: datetime) -> datetime:
        if self.zone is None:
            return naive.astimezone()
        return naive.replace(tzinfo=self.zone)
