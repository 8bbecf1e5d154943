"""Agenda error types."""


class AgendaError(Exception):
    """Base class for agenda errors."""


class ConfigError(AgendaError):
    """Invalid configuration (unknown time zone, duplicate source kinds)."""


class SourceFetchError(AgendaError):
    """An event source failed to supply entries."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class OutOfRangeError(AgendaError, IndexError):
    """Row index outside the current row list. Always a caller bug."""

    def __init__(self, index: int, count: int):
        super().__init__(f"Row index {index} out of range (count={count})")
        self.index = index
        self.count = count


class ClassificationError(AgendaError, ValueError):
    """An entry's start instant cannot be placed on a calendar day."""


class UnsupportedKindError(AgendaError, LookupError):
    """No source is registered to render this row kind."""
