"""Text formatting for rows - day header labels and event lines."""

from agenda.core.rows import CalendarEvent, DayHeader, EventEntry


def format_day_label(
    header: DayHeader,
    today: str = "Today",
    tomorrow: str = "Tomorrow",
) -> str:
    """
    Format a day header, e.g. "TODAY, JANUARY 15" or "FRIDAY, JANUARY 17".

    The weekday is only shown when the day is neither today nor tomorrow.
    """
    day = header.day_start
    date_str = f"{day:%B} {day.day}"
    if header.is_today:
        label = f"{today}, {date_str}"
    elif header.is_tomorrow:
        label = f"{tomorrow}, {date_str}"
    else:
        label = f"{day:%A}, {date_str}"
    return label.upper()


def format_time(entry: EventEntry) -> str:
    if entry.all_day:
        return "All day"
    return entry.start.strftime("%H:%M")


def format_event_line(entry: EventEntry) -> str:
    """Format an event row like "  14:00    Standup @ Room A"."""
    event = entry.payload
    if isinstance(event, CalendarEvent):
        title, location = event.title, event.location
    else:
        title, location = str(event), ""
    loc = f" @ {location}" if location else ""
    return f"  {format_time(entry):8} {title}{loc}"
