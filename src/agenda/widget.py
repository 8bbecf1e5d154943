"""Row factory - the display surface's view of the merged agenda."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from .core.days import DayCalculator
from .core.merge import build_rows
from .core.rows import DayHeader, Row, RowList
from .errors import ConfigError, SourceFetchError, UnsupportedKindError
from .labels import format_day_label
from .ports.event_source import EventSource

logger = logging.getLogger(__name__)

STALE = "stale"
MATERIALIZED = "materialized"


class AgendaRowsFactory:
    """
    Indexed rows for a display surface that fetches lazily by position.

    The row list is rebuilt completely on each on_refresh() and swapped
    in with a single assignment, so readers see either the previous
    snapshot or the next one. Each read dereferences the snapshot once.
    """

    def __init__(
        self,
        sources: Sequence[EventSource],
        calculator: DayCalculator | None = None,
        header_formatter: Callable[[DayHeader], Any] = format_day_label,
        cross_source_sort: bool = True,
        clock: Callable[[], datetime] | None = None,
    ):
        self.sources = list(sources)
        self.calculator = calculator or DayCalculator()
        self.header_formatter = header_formatter
        self.cross_source_sort = cross_source_sort
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self._renderers: dict[str, EventSource] = {}
        for source in self.sources:
            kind = source.supported_kind()
            if kind in self._renderers:
                raise ConfigError(f"Duplicate source kind: {kind!r}")
            self._renderers[kind] = source

        self._rows = RowList.empty()
        self._materialized = False

    @property
    def state(self) -> str:
        return MATERIALIZED if self._materialized else STALE

    @property
    def rows(self) -> RowList:
        """Current snapshot."""
        return self._rows

    def count(self) -> int:
        return self._rows.count()

    def row_at(self, index: int) -> Row:
        return self._rows.row_at(index)

    def stable_id(self, index: int) -> int:
        return self._rows.stable_id(index)

    def has_stable_ids(self) -> bool:
        return True

    def row_kind_count(self) -> int:
        """Distinct row kinds across all sources, plus one for day headers."""
        return sum(source.kind_count() for source in self.sources) + 1

    def render_at(self, index: int) -> Any:
        row = self._rows.row_at(index)
        if row.is_header:
            return self.header_formatter(row)
        source = self._renderers.get(row.kind)
        if source is None:
            raise UnsupportedKindError(f"No renderer for row kind {row.kind!r}")
        return source.render_row(row)

    def on_refresh(self) -> RowList:
        """
        Re-pull every source and swap in a freshly built row list.

        A failing source raises SourceFetchError and a clock returning a
        naive datetime raises ClassificationError; either way the
        previous snapshot stays in place.
        """
        streams = [self._fetch(source) for source in self.sources]
        rows = build_rows(
            streams,
            self.calculator,
            self.clock(),
            cross_source_sort=self.cross_source_sort,
        )
        self._rows = rows
        self._materialized = True
        logger.info(
            f"Rebuilt agenda: {rows.count()} rows from {len(self.sources)} sources"
            + (f", {rows.skipped} skipped" if rows.skipped else "")
        )
        return rows

    def on_teardown(self) -> None:
        self._rows = RowList.empty()
        self._materialized = False

    def _fetch(self, source: EventSource) -> list:
        name = getattr(source, "name", source.supported_kind())
        try:
            return source.fetch_entries()
        except SourceFetchError:
            raise
        except Exception as e:
            raise SourceFetchError(name, str(e) or type(e).__name__) from e
