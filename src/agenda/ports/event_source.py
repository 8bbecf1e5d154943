"""Event source interface."""

from typing import Any, Protocol

from agenda.core.rows import EventEntry


class EventSource(Protocol):
    """Interface for anything that supplies event entries to the row list."""

    name: str

    def fetch_entries(self) -> list[EventEntry]:
        """Fetch upcoming entries, sorted by start. Raises SourceFetchError on failure."""
        ...

    def supported_kind(self) -> str:
        """The EventEntry.kind this source produces and renders."""
        ...

    def kind_count(self) -> int:
        """Number of distinct row kinds this source renders."""
        ...

    def render_row(self, entry: EventEntry) -> Any:
        """Render one of this source's entries for the display surface."""
        ...
