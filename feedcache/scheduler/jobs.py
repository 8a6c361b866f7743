from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from feedcache.core.errors import ScanInProgressError
from feedcache.utils.logger import get_logger

if TYPE_CHECKING:
    from feedcache.core.engine import RefreshEngine, ScanReport

log = get_logger(__name__)


def scan_feeds_job(engine: "RefreshEngine") -> Optional["ScanReport"]:
    """
    Scheduler job that walks the registry once.
    This function should contain no business logic beyond orchestration.
    A tick that lands while a manual scan is running is skipped.
    """
    try:
        log.info("[Scheduler] Starting feed scan")
        report = engine.scan_and_refresh_all()
        log.info(
            "[Scheduler] Completed feed scan: {} ({} refreshed, {} failed)",
            report.status,
            report.refreshed,
            report.failed,
        )
        return report
    except ScanInProgressError:
        log.warning("[Scheduler] Skipping tick: a feed scan is already running")
        return None
    except Exception as exc:
        log.exception("[Scheduler] Feed scan failed | Error: {}", exc)
        raise
