"""Adapters - I/O implementations of ports."""

from agenda.config import Config
from agenda.core.days import DayCalculator

from .icalpal import IcalPalSource
from .gcalcli import GcalcliSource
from .static import StaticSource

__all__ = [
    "IcalPalSource",
    "GcalcliSource",
    "StaticSource",
    "build_sources",
]


def build_sources(config: Config, calculator: DayCalculator) -> list:
    """Build the configured event sources: icalPal first, then each gcalcli account."""
    sources: list = []
    if config.use_icalpal:
        sources.append(
            IcalPalSource(
                zone=calculator.zone,
                days=config.days,
                include_calendars=config.icalpal_include_calendars or None,
                exclude_calendars=config.icalpal_exclude_calendars or None,
            )
        )
    for account in config.gcalcli_accounts:
        sources.append(
            GcalcliSource(
                zone=calculator.zone,
                days=config.days,
                config_folder=account.config_folder,
                label=account.label,
                calendars=account.calendars or None,
            )
        )
    return sources
