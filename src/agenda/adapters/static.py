"""In-memory event source, for fixtures and embedding."""

from agenda.core.rows import EventEntry
from agenda.labels import format_event_line


class StaticSource:
    """Serves a fixed list of entries. Implements the EventSource protocol."""

    def __init__(self, entries: list[EventEntry] | None = None, kind: str = "static", name: str | None = None):
        self.entries = list(entries or [])
        self.kind = kind
        self.name = name or kind

    def fetch_entries(self) -> list[EventEntry]:
        return list(self.entries)

    def supported_kind(self) -> str:
        return self.kind

    def kind_count(self) -> int:
        return 1

    def render_row(self, entry: EventEntry) -> str:
        return format_event_line(entry)
