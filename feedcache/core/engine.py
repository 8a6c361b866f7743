from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from models.feed import CacheEntry, FeedItem
from models.registry import clamp_cache_minutes
from feedcache.core.config import Config
from feedcache.core.errors import PersistenceError, ScanInProgressError
from feedcache.core.fetcher import FeedFetcher
from feedcache.core.registry import FeedRegistry
from feedcache.core.staleness import describe_staleness, is_stale
from feedcache.core.state import resolve_state_path, write_last_scan
from feedcache.core.storage import CacheStore
from feedcache.feeds.normalize import normalise_feed_url
from feedcache.utils.logger import get_logger

log = get_logger(__name__)

SCAN_LIMIT = 30
SCAN_TIMEOUT_SECONDS = 30.0
WARM_TIMEOUT_SECONDS = 4.0


@dataclass(slots=True)
class CachedFeed:
    items: List[FeedItem] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"items": [item.to_dict() for item in self.items], "error": self.error}


@dataclass(slots=True)
class ScanReport:
    run_id: str
    started_at: str
    finished_at: Optional[str] = None
    scanned: int = 0
    refreshed: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.failed and self.refreshed:
            return "partial"
        if self.failed:
            return "failed"
        return "success"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "status": self.status,
            "scanned": self.scanned,
            "refreshed": self.refreshed,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }


class RefreshEngine:
    """
    Keeps the cache store in step with the registry.

    The scheduled scan refreshes stale or errored feeds one after another;
    ``get_cached`` is the read path used while rendering and only touches the
    network for a privileged warm-up of an empty cache.
    """

    def __init__(
        self,
        registry: FeedRegistry,
        store: CacheStore,
        fetcher: FeedFetcher,
        *,
        privilege_check: Optional[Callable[[], bool]] = None,
        clock: Optional[Callable[[], float]] = None,
        scan_limit: int = SCAN_LIMIT,
        scan_timeout: float = SCAN_TIMEOUT_SECONDS,
        warm_timeout: float = WARM_TIMEOUT_SECONDS,
        state_path: Optional[Path] = None,
    ):
        self.registry = registry
        self.store = store
        self.fetcher = fetcher
        self.privilege_check = privilege_check
        self.clock = clock or time.time
        self.scan_limit = scan_limit
        self.scan_timeout = scan_timeout
        self.warm_timeout = warm_timeout
        self.state_path = state_path
        self._scan_lock = threading.Lock()

    @classmethod
    def from_config(cls, *, privilege_check: Optional[Callable[[], bool]] = None) -> "RefreshEngine":
        return cls(
            FeedRegistry(),
            CacheStore(),
            FeedFetcher(),
            privilege_check=privilege_check,
            scan_limit=int(Config.get("refresh", "scan_limit", default=SCAN_LIMIT)),
            scan_timeout=float(Config.get("refresh", "scan_timeout_seconds", default=SCAN_TIMEOUT_SECONDS)),
            warm_timeout=float(Config.get("refresh", "warm_timeout_seconds", default=WARM_TIMEOUT_SECONDS)),
            state_path=resolve_state_path(),
        )

    def now(self) -> int:
        return int(self.clock())

    def is_stale(self, entry: Optional[CacheEntry], cache_ttl_seconds: int = 0, *, now: Optional[float] = None) -> bool:
        return is_stale(entry, cache_ttl_seconds, now=self.now() if now is None else now)

    def _fetch(self, feed_url: str, limit: int, timeout: float):
        try:
            items, error = self.fetcher.fetch(feed_url, limit=limit, timeout=timeout)
        except Exception as exc:  # noqa: BLE001
            log.exception("Fetcher crashed for {}", feed_url)
            return [], str(exc) or type(exc).__name__
        return list(items or []), error

    def refresh_now(self, feed_url: str, limit: int = SCAN_LIMIT, timeout: float = SCAN_TIMEOUT_SECONDS) -> CacheEntry:
        """Fetch *feed_url* and overwrite its cache entry. Always does network I/O."""
        items, error = self._fetch(feed_url, limit, timeout)
        fetched_at = self.now()
        if error:
            entry = CacheEntry.failure(error, fetched_at=fetched_at)
        else:
            entry = CacheEntry.success(items, fetched_at=fetched_at)
        self.store.write(feed_url, entry)
        return entry

    def _log_decision(self, action: str, feed_url: str, cache_ttl: int, reason: str) -> None:
        log.info("[scan] {} {} cache_ttl={}s reason={}", action, feed_url, cache_ttl, reason)

    def scan_and_refresh_all(self) -> ScanReport:
        """
        Walk the registry once, refreshing stale or errored feeds.

        At most one scan runs per engine; a concurrent call raises
        ``ScanInProgressError`` instead of waiting.
        """
        if not self._scan_lock.acquire(blocking=False):
            raise ScanInProgressError("A feed scan is already running")
        try:
            return self._scan_registry()
        finally:
            self._scan_lock.release()

    def _scan_registry(self) -> ScanReport:
        started_at = datetime.now(timezone.utc)
        report = ScanReport(
            run_id=f"scan-{started_at.strftime('%Y-%m-%dT%H-%M-%S')}",
            started_at=started_at.isoformat(),
        )

        for record in self.registry.scan_all():
            report.scanned += 1
            feed_url = record.feed_url
            # Registry lifetime is reported only; the entry's own TTL decides.
            cache_ttl = record.cache_minutes * 60

            try:
                entry = self.store.read(feed_url)
                now = self.now()
                if not self.is_stale(entry, cache_ttl, now=now):
                    report.skipped += 1
                    self._log_decision("SKIP", feed_url, cache_ttl, describe_staleness(entry, now=now))
                    continue

                self._log_decision("RUN", feed_url, cache_ttl, describe_staleness(entry, now=now))
                refreshed = self.refresh_now(feed_url, limit=self.scan_limit, timeout=self.scan_timeout)
            except Exception as exc:  # noqa: BLE001
                log.exception("Refresh failed for {}", feed_url)
                report.failed += 1
                report.errors.append({"feed": feed_url, "error": str(exc)})
                continue

            if refreshed.error:
                report.failed += 1
                report.errors.append({"feed": feed_url, "error": refreshed.error})
            else:
                report.refreshed += 1

        report.finished_at = datetime.now(timezone.utc).isoformat()
        log.info(
            "Scan {} finished: status={} scanned={} refreshed={} failed={} skipped={}",
            report.run_id,
            report.status,
            report.scanned,
            report.refreshed,
            report.failed,
            report.skipped,
        )

        if self.state_path is not None:
            try:
                write_last_scan(report.to_dict(), self.state_path)
            except PersistenceError as exc:
                log.error("Could not record scan state: {}", exc.message)

        return report

    def _is_privileged(self, privileged: Optional[bool]) -> bool:
        if privileged is not None:
            return bool(privileged)
        if self.privilege_check is None:
            return False
        return bool(self.privilege_check())

    def get_cached(
        self,
        feed_url: str,
        max_items: Any,
        cache_minutes: Any,
        warm_if_empty: bool = False,
        *,
        privileged: Optional[bool] = None,
    ) -> CachedFeed:
        """
        Return at most *max_items* cached items for *feed_url*.

        Read-only unless the cache holds no items, *warm_if_empty* is set and
        the caller is privileged: then one short fetch runs and, on success,
        is written through with the caller's cache lifetime as TTL.
        """
        feed_url = normalise_feed_url(feed_url)
        if not feed_url:
            return CachedFeed()
        try:
            max_items = max(1, int(max_items))
        except (TypeError, ValueError):
            max_items = 1
        cache_ttl = clamp_cache_minutes(cache_minutes) * 60

        entry = self.store.read(feed_url)
        items: List[FeedItem] = []
        error: Optional[str] = None

        if entry is not None and entry.has_items:
            items = entry.items
            error = entry.error
        elif warm_if_empty and self._is_privileged(privileged):
            log.info("Warming empty cache for {} (timeout={}s)", feed_url, self.warm_timeout)
            fetched, fetch_error = self._fetch(feed_url, max_items, self.warm_timeout)
            if fetch_error:
                error = fetch_error
            else:
                items = fetched
                self.store.write(feed_url, CacheEntry.success(items, fetched_at=self.now(), ttl=cache_ttl))
        elif entry is not None:
            error = entry.error

        return CachedFeed(items=list(items[:max_items]), error=error)


__all__ = ["RefreshEngine", "CachedFeed", "ScanReport"]
