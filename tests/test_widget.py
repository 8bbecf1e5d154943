"""Tests for the row factory served to the display surface."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from agenda.adapters.static import StaticSource
from agenda.core.rows import CalendarEvent, EventEntry, RowList
from agenda.errors import (
    ClassificationError,
    ConfigError,
    OutOfRangeError,
    SourceFetchError,
    UnsupportedKindError,
)
from agenda.widget import AgendaRowsFactory, MATERIALIZED, STALE


@pytest.fixture
def make_factory(calculator, now):
    def _make(*sources, **kwargs):
        return AgendaRowsFactory(list(sources), calculator, clock=lambda: now, **kwargs)

    return _make


@pytest.fixture
def failing_source():
    source = MagicMock()
    source.name = "broken"
    source.supported_kind.return_value = "broken"
    source.kind_count.return_value = 1
    source.fetch_entries.side_effect = SourceFetchError("broken", "offline")
    return source


class TestLifecycle:
    def test_starts_stale_and_empty(self, make_factory):
        factory = make_factory(StaticSource())
        assert factory.state == STALE
        assert factory.count() == 0

    def test_refresh_materializes(self, make_factory, make_entry):
        factory = make_factory(StaticSource([make_entry("a", 9)]))
        factory.on_refresh()
        assert factory.state == MATERIALIZED
        assert factory.count() == 2

    def test_refresh_with_no_events(self, make_factory):
        factory = make_factory(StaticSource(), StaticSource(kind="other"))
        factory.on_refresh()
        assert factory.state == MATERIALIZED
        assert factory.count() == 0

    def test_teardown_clears(self, make_factory, make_entry):
        factory = make_factory(StaticSource([make_entry("a", 9)]))
        factory.on_refresh()
        factory.on_teardown()
        assert factory.state == STALE
        assert factory.count() == 0

    def test_refresh_replaces_whole_list(self, make_factory, make_entry):
        source = StaticSource([make_entry("a", 9), make_entry("b", 9, day_offset=1)])
        factory = make_factory(source)
        first = factory.on_refresh()

        source.entries = [make_entry("c", 10)]
        second = factory.on_refresh()

        assert first.count() == 4
        assert second.count() == 2
        assert factory.rows is second
        # The earlier snapshot is untouched
        assert first.row_at(3).payload.title == "b"


class TestIndexing:
    def test_scenario_today_tomorrow(self, make_factory, make_entry):
        factory = make_factory(
            StaticSource([make_entry("09:00", 9), make_entry("14:00", 14), make_entry("10:00", 10, day_offset=1)])
        )
        factory.on_refresh()

        kinds = ["header" if factory.row_at(i).is_header else factory.row_at(i).payload.title for i in range(5)]
        assert kinds == ["header", "09:00", "14:00", "header", "10:00"]
        assert factory.row_at(0).is_today is True
        assert factory.row_at(3).is_tomorrow is True

    def test_scenario_two_sources_out_of_order(self, make_factory, make_entry):
        source_a = StaticSource([make_entry("20:00", 20, kind="a")], kind="a")
        source_b = StaticSource([make_entry("08:00", 8, kind="b")], kind="b")
        factory = make_factory(source_a, source_b)
        factory.on_refresh()

        assert factory.count() == 3
        assert factory.row_at(0).is_header
        assert factory.row_at(1).payload.title == "08:00"
        assert factory.row_at(2).payload.title == "20:00"

    def test_stable_id_is_index(self, make_factory, make_entry):
        factory = make_factory(StaticSource([make_entry(str(h), h, day_offset=h % 3) for h in range(6)]))
        factory.on_refresh()
        assert factory.has_stable_ids() is True
        assert [factory.stable_id(i) for i in range(factory.count())] == list(range(factory.count()))

    @pytest.mark.parametrize("index", [-1, 2, 100])
    def test_out_of_range(self, make_factory, make_entry, index):
        factory = make_factory(StaticSource([make_entry("a", 9)]))
        factory.on_refresh()
        with pytest.raises(OutOfRangeError):
            factory.row_at(index)
        with pytest.raises(OutOfRangeError):
            factory.stable_id(index)

    def test_out_of_range_is_index_error(self, make_factory):
        with pytest.raises(IndexError):
            make_factory(StaticSource()).row_at(0)

    def test_last_row_readable_after_count(self, make_factory, make_entry):
        source = StaticSource([make_entry(str(h), h) for h in range(8, 12)])
        factory = make_factory(source)
        for _ in range(3):
            factory.on_refresh()
            count = factory.count()
            assert factory.row_at(count - 1) is not None
            source.entries = source.entries[:-1]


class TestFailures:
    def test_failed_refresh_keeps_previous_rows(self, make_factory, make_entry, failing_source):
        good = StaticSource([make_entry("a", 9)])
        factory = make_factory(good, failing_source)
        failing_source.fetch_entries.side_effect = None
        failing_source.fetch_entries.return_value = []
        before = factory.on_refresh()

        failing_source.fetch_entries.side_effect = SourceFetchError("broken", "offline")
        with pytest.raises(SourceFetchError):
            factory.on_refresh()

        assert factory.rows is before
        assert factory.state == MATERIALIZED
        assert factory.count() == 2

    def test_failure_while_stale(self, make_factory, failing_source):
        factory = make_factory(failing_source)
        with pytest.raises(SourceFetchError) as exc_info:
            factory.on_refresh()
        assert exc_info.value.source == "broken"
        assert factory.state == STALE

    def test_unexpected_exception_wrapped(self, make_factory):
        source = MagicMock()
        source.name = "flaky"
        source.supported_kind.return_value = "flaky"
        source.fetch_entries.side_effect = OSError("disk gone")

        factory = make_factory(source)
        with pytest.raises(SourceFetchError) as exc_info:
            factory.on_refresh()
        assert exc_info.value.source == "flaky"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_no_retry(self, make_factory, failing_source):
        factory = make_factory(failing_source)
        with pytest.raises(SourceFetchError):
            factory.on_refresh()
        failing_source.fetch_entries.assert_called_once()

    def test_naive_clock_fails_refresh_and_keeps_rows(self, calculator, now, make_entry, caplog):
        clock = MagicMock(return_value=now)
        factory = AgendaRowsFactory(
            [StaticSource([make_entry("a", 9), make_entry("b", 10)])], calculator, clock=clock
        )
        before = factory.on_refresh()

        clock.return_value = datetime(2025, 1, 15, 12, 0)
        with pytest.raises(ClassificationError):
            factory.on_refresh()

        assert factory.rows is before
        assert factory.count() == 3
        assert "Skipping" not in caplog.text

    def test_skipped_entries_counted(self, make_factory, make_entry):
        naive = EventEntry(start=datetime(2025, 1, 15, 10, 0), payload=CalendarEvent("naive"), kind="static")
        factory = make_factory(StaticSource([make_entry("a", 9), naive]))
        rows = factory.on_refresh()
        assert rows.skipped == 1
        assert factory.count() == 2


class TestRendering:
    def test_row_kind_count_sums_sources(self, make_factory):
        multi = MagicMock()
        multi.supported_kind.return_value = "multi"
        multi.kind_count.return_value = 3
        factory = make_factory(StaticSource(kind="a"), multi)
        assert factory.row_kind_count() == 1 + 3 + 1

    def test_row_kind_count_no_sources(self, make_factory):
        assert make_factory().row_kind_count() == 1

    def test_duplicate_kinds_rejected(self, make_factory):
        with pytest.raises(ConfigError):
            make_factory(StaticSource(kind="a"), StaticSource(kind="a"))

    def test_header_rendered_by_formatter(self, make_factory, make_entry):
        factory = make_factory(
            StaticSource([make_entry("a", 9)]),
            header_formatter=lambda h: f"header {h.day_start.date()}",
        )
        factory.on_refresh()
        assert factory.render_at(0) == "header 2025-01-15"

    def test_default_header_label(self, make_factory, make_entry):
        factory = make_factory(StaticSource([make_entry("a", 9, day_offset=1)]))
        factory.on_refresh()
        assert factory.render_at(0) == "TOMORROW, JANUARY 16"

    def test_event_dispatched_to_its_source(self, make_factory, make_entry):
        other = MagicMock()
        other.supported_kind.return_value = "b"
        other.kind_count.return_value = 1
        other.fetch_entries.return_value = [make_entry("from b", 10, kind="b")]
        other.render_row.return_value = "rendered by b"

        factory = make_factory(StaticSource([make_entry("from a", 9, kind="a")], kind="a"), other)
        factory.on_refresh()

        assert factory.render_at(1) == "  09:00    from a"
        assert factory.render_at(2) == "rendered by b"
        other.render_row.assert_called_once_with(factory.row_at(2))

    def test_event_time_shown_in_reference_zone(self, make_factory):
        late = EventEntry(
            start=datetime(2025, 1, 16, 3, 30, tzinfo=timezone.utc),
            payload=CalendarEvent("Late call"),
            kind="static",
        )
        factory = make_factory(StaticSource([late]))
        factory.on_refresh()

        assert factory.render_at(0) == "TODAY, JANUARY 15"
        assert factory.render_at(1) == "  22:30    Late call"

    def test_unknown_kind(self, make_factory, make_entry):
        factory = make_factory(StaticSource([make_entry("stray", 9, kind="elsewhere")], kind="a"))
        factory.on_refresh()
        with pytest.raises(UnsupportedKindError):
            factory.render_at(1)


class TestRowList:
    def test_empty(self):
        rows = RowList.empty()
        assert rows.count() == 0
        assert list(rows.headers()) == []
        with pytest.raises(OutOfRangeError):
            rows.row_at(0)

    def test_events_and_headers(self, make_factory, make_entry):
        factory = make_factory(StaticSource([make_entry("a", 9), make_entry("b", 9, day_offset=2)]))
        rows = factory.on_refresh()
        assert len(list(rows.headers())) == 2
        assert [e.payload.title for e in rows.events()] == ["a", "b"]
