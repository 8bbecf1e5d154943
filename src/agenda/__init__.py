"""Agenda - day-bucketed event rows for widget-style displays."""

__version__ = "0.1.0"
