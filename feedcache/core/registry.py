"""Registry of watched feeds and the cache lifetime each consumer asked for."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

try:  # pragma: no cover - platform dependent
    import fcntl
except ImportError:  # pragma: no cover - non-POSIX
    fcntl = None

from models.registry import RegistryRecord, clamp_cache_minutes
from feedcache.core.config import Config
from feedcache.core.errors import PersistenceError
from feedcache.core.storage import read_json, write_json_atomic
from feedcache.feeds.normalize import normalise_feed_id, normalise_feed_url
from feedcache.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_REGISTRY_PATH = Path("data/system/feed_registry.json")


@contextmanager
def _file_lock(path: Path) -> Iterator[None]:
    """Hold an exclusive flock on *path* (created if missing) for the block."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_file = path.open("a+")
    except OSError as exc:
        raise PersistenceError(f"Cannot open lock {path}: {exc}", path=str(path), operation="lock") from exc

    with lock_file:
        if fcntl is None:  # pragma: no cover - non-POSIX
            yield
            return
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


class FeedRegistry:
    """
    Single JSON document mapping feed id to RegistryRecord.

    Entries are only ever added or updated; nothing here removes one.
    Upserts hold a thread lock and an flock on a sidecar ``.lock`` file, so
    several worker processes may share one registry document.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path or Config.get("storage", "registry_file", default=DEFAULT_REGISTRY_PATH))
        self._lock = threading.Lock()
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    def _load(self) -> Dict[str, RegistryRecord]:
        raw = read_json(self.path)
        records: Dict[str, RegistryRecord] = {}
        if not isinstance(raw, list):
            return records
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            try:
                record = RegistryRecord.from_dict(entry)
            except (TypeError, ValueError, AttributeError):
                continue
            if record.feed_id:
                records[record.feed_id] = record
        return records

    def _save(self, records: Dict[str, RegistryRecord]) -> None:
        payload: List[Dict[str, Any]] = [record.to_dict() for record in records.values()]
        write_json_atomic(self.path, payload)

    def register(self, feed_url: str, cache_minutes: Any) -> None:
        """Upsert *feed_url*; ``cache_minutes`` is clamped to at least 5."""
        feed_url = normalise_feed_url(feed_url)
        if not feed_url:
            return

        feed_id = normalise_feed_id(feed_url)
        record = RegistryRecord(
            feed_id=feed_id,
            feed_url=feed_url,
            cache_minutes=clamp_cache_minutes(cache_minutes),
        )
        record.touch_seen()

        with self._lock, _file_lock(self.lock_path):
            records = self._load()
            records[feed_id] = record
            self._save(records)

    def scan_all(self) -> Iterator[RegistryRecord]:
        """Yield a snapshot of every registered feed, taken when iteration starts."""
        with self._lock:
            records = list(self._load().values())
        yield from records

    def get(self, feed_url: str) -> Optional[RegistryRecord]:
        return self._load().get(normalise_feed_id(feed_url))

    def __len__(self) -> int:
        return len(self._load())


__all__ = ["FeedRegistry", "DEFAULT_REGISTRY_PATH"]
