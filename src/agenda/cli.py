"""Agenda CLI - preview the widget rows in a terminal."""

import json
import logging
import sys

import click

from .adapters import build_sources
from .config import Config, load_config
from .core.days import DayCalculator, resolve_zone
from .errors import AgendaError, ConfigError, SourceFetchError
from .labels import format_day_label
from .widget import AgendaRowsFactory


def build_factory(config: Config) -> AgendaRowsFactory:
    """Wire the configured sources, zone and labels into a row factory."""
    calculator = DayCalculator(resolve_zone(config.timezone))

    def header_formatter(header):
        return format_day_label(header, today=config.today_label, tomorrow=config.tomorrow_label)

    return AgendaRowsFactory(
        build_sources(config, calculator),
        calculator,
        header_formatter=header_formatter,
        cross_source_sort=config.cross_source_sort,
    )


def _serialize_row(factory: AgendaRowsFactory, index: int) -> dict:
    row = factory.row_at(index)
    data = {"stable_id": factory.stable_id(index)}
    if row.is_header:
        data.update(
            type="header",
            day_start=row.day_start.isoformat(),
            is_today=row.is_today,
            is_tomorrow=row.is_tomorrow,
        )
        return data

    event = row.payload
    data.update(
        type=row.kind,
        start=row.start.isoformat(),
        all_day=row.all_day,
        title=getattr(event, "title", str(event)),
        end=event.end.isoformat() if getattr(event, "end", None) else None,
        location=getattr(event, "location", ""),
        calendar=getattr(event, "calendar", ""),
    )
    return data


def _show_rows(factory: AgendaRowsFactory, as_json: bool) -> None:
    count = factory.count()
    if as_json:
        click.echo(json.dumps([_serialize_row(factory, i) for i in range(count)], indent=2))
        return

    if not count:
        click.echo("No upcoming events.")
        return

    for i in range(count):
        if factory.row_at(i).is_header and i:
            click.echo()
        click.echo(factory.render_at(i))


@click.group()
@click.version_option(package_name="agenda-rows")
def main():
    """Agenda - day-grouped event rows."""
    pass


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--days", type=click.IntRange(min=1), default=None, help="Override lookahead days")
def rows(as_json: bool, days: int | None):
    """Refresh once and print the rows."""
    config = load_config()
    if days:
        config.days = days

    try:
        factory = build_factory(config)
        factory.on_refresh()
    except (SourceFetchError, ConfigError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _show_rows(factory, as_json)
    if factory.rows.skipped:
        click.echo(f"({factory.rows.skipped} entries skipped)", err=True)


@main.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def watch(debug: bool):
    """Refresh and print the rows every REFRESH_MINUTES."""
    from apscheduler.schedulers.blocking import BlockingScheduler

    from .scheduler import build_scheduler, run_refresh_job

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )

    config = load_config()
    try:
        factory = build_factory(config)
    except AgendaError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    def refresh_and_show(factory: AgendaRowsFactory) -> None:
        if run_refresh_job(factory):
            _show_rows(factory, as_json=False)

    refresh_and_show(factory)
    scheduler = build_scheduler(factory, config, scheduler_cls=BlockingScheduler, job=refresh_and_show)

    click.echo(f"Refreshing every {config.refresh_minutes} min. Press Ctrl+C to stop")
    try:
        scheduler.start()
    except KeyboardInterrupt:
        click.echo("\nStopped.")
