from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from feedcache.core.config import Config
from feedcache.scheduler.jobs import scan_feeds_job
from feedcache.utils.logger import get_logger

if TYPE_CHECKING:
    from feedcache.core.engine import RefreshEngine

log = get_logger(__name__)

SCAN_JOB_ID = "feedcache_scan_feeds"
DEFAULT_INTERVAL_SECONDS = 60


def resolve_interval(interval_seconds: Optional[int] = None) -> int:
    if interval_seconds is None:
        interval_seconds = Config.get("refresh", "interval_seconds", default=DEFAULT_INTERVAL_SECONDS)
    try:
        return max(int(interval_seconds), 1)
    except (TypeError, ValueError):
        return DEFAULT_INTERVAL_SECONDS


def install_scan_job(
    scheduler: BaseScheduler,
    engine: "RefreshEngine",
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
):
    """Add (or replace) the recurring scan; the first run is one interval away.

    ``max_instances=1`` keeps at most one scan in flight; overlapping ticks
    are coalesced instead of queued.
    """
    interval = resolve_interval(interval_seconds)
    job = scheduler.add_job(
        scan_feeds_job,
        trigger=IntervalTrigger(seconds=interval),
        args=[engine],
        id=SCAN_JOB_ID,
        name="Scan registered feeds",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=interval,
    )
    log.info("Installed {} every {}s", SCAN_JOB_ID, interval)
    return job


def uninstall_scan_job(scheduler: BaseScheduler) -> bool:
    if scheduler.get_job(SCAN_JOB_ID) is None:
        return False
    scheduler.remove_job(SCAN_JOB_ID)
    log.info("Removed {}", SCAN_JOB_ID)
    return True


def create_background_scheduler(engine: "RefreshEngine", interval_seconds: Optional[int] = None) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="UTC")
    install_scan_job(scheduler, engine, resolve_interval(interval_seconds))
    return scheduler


def start_scheduler(engine: "RefreshEngine", interval_seconds: Optional[int] = None) -> None:
    scheduler = BlockingScheduler(timezone="UTC")
    install_scan_job(scheduler, engine, resolve_interval(interval_seconds))
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        log.info("Scheduler stopped")
