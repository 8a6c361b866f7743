from feedcache.scheduler.jobs import scan_feeds_job
from feedcache.scheduler.scheduler import (
    SCAN_JOB_ID,
    create_background_scheduler,
    install_scan_job,
    start_scheduler,
    uninstall_scan_job,
)

__all__ = [
    "SCAN_JOB_ID",
    "create_background_scheduler",
    "install_scan_job",
    "scan_feeds_job",
    "start_scheduler",
    "uninstall_scan_job",
]
