"""Refresh scheduling - decides when the agenda rows are rebuilt."""

import logging
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from .config import Config
from .errors import SourceFetchError
from .widget import AgendaRowsFactory

logger = logging.getLogger(__name__)


def run_refresh_job(factory: AgendaRowsFactory) -> bool:
    """Refresh once. On a source failure the previous rows stay visible."""
    try:
        factory.on_refresh()
    except SourceFetchError as e:
        logger.warning(f"Agenda refresh failed, keeping previous rows: {e}")
        return False
    return True


def build_scheduler(
    factory: AgendaRowsFactory,
    config: Config,
    scheduler_cls: type = BackgroundScheduler,
    job: Callable[[AgendaRowsFactory], object] = run_refresh_job,
):
    """Create a scheduler that runs job(factory) every REFRESH_MINUTES."""
    scheduler = scheduler_cls()
    scheduler.add_job(
        job,
        "interval",
        kwargs={"factory": factory},
        minutes=config.refresh_minutes,
        id="agenda_refresh_job",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=120,
    )
    return scheduler
