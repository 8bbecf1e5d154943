"""Configuration management for Agenda."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

AGENDA_HOME = Path(os.environ.get("AGENDA_HOME", Path.home() / "agenda"))
CONFIG_FILE = AGENDA_HOME / "config" / "agenda.conf"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class GcalAccount:
    """A gcalcli account configuration."""

    config_folder: str
    label: str | None = None
    calendars: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Agenda configuration."""

    # "local" = device zone; otherwise an IANA name used for all day boundaries
    timezone: str = "local"
    days: int = 7
    cross_source_sort: bool = True
    use_icalpal: bool = True
    icalpal_include_calendars: list[str] = field(default_factory=list)
    icalpal_exclude_calendars: list[str] = field(default_factory=list)
    gcalcli_accounts: list[GcalAccount] = field(default_factory=list)
    refresh_minutes: int = 30
    today_label: str = "Today"
    tomorrow_label: str = "Tomorrow"


def _parse_bool(key: str, value: str, default: bool) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    logger.warning(f"Invalid boolean for {key.upper()}: {value!r}")
    return default


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}")
        return default
    if parsed < 1:
        logger.warning(f"{key.upper()} must be positive, got {parsed}")
        return default
    return parsed


def _parse_accounts(value: str) -> list[GcalAccount]:
    # JSON format: [{"config_folder": "...", "label": "...", "calendars": [...]}]
    # Simple format: "path1:label1,path2:label2"
    accounts = []
    if value.startswith("["):
        try:
            data = json.loads(value)
            for item in data:
                accounts.append(
                    GcalAccount(
                        config_folder=item["config_folder"],
                        label=item.get("label"),
                        calendars=item.get("calendars", []),
                    )
                )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Failed to parse GCALCLI_ACCOUNTS JSON: {e}")
        return accounts

    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if ":" in entry:
            folder, label = entry.split(":", 1)
            accounts.append(GcalAccount(folder.strip(), label.strip()))
        else:
            accounts.append(GcalAccount(entry))
    return accounts


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _split_list(value: str) -> list[str]:
    return [c.strip() for c in value.split(",") if c.strip()]


def load_config(path: Path | None = None) -> Config:
    """Load configuration from agenda.conf."""
    path = path or CONFIG_FILE
    config = Config()

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value or "local"
            case "days":
                config.days = _parse_int(key, value, config.days)
            case "cross_source_sort":
                config.cross_source_sort = _parse_bool(key, value, config.cross_source_sort)
            case "use_icalpal":
                config.use_icalpal = _parse_bool(key, value, config.use_icalpal)
            case "icalpal_include_calendars":
                config.icalpal_include_calendars = _split_list(value)
            case "icalpal_exclude_calendars":
                config.icalpal_exclude_calendars = _split_list(value)
            case "gcalcli_accounts":
                config.gcalcli_accounts = _parse_accounts(value)
            case "refresh_minutes":
                config.refresh_minutes = _parse_int(key, value, config.refresh_minutes)
            case "today_label":
                config.today_label = value
            case "tomorrow_label":
                config.tomorrow_label = value
            case _:
                logger.debug(f"Ignoring unknown config key: {key}")

    return config
