"""Durable per-feed cache storage.

One JSON document per feed, named after the feed's cache key, so reading a
feed costs one file and nothing is bulk-loaded at start-up.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from models.feed import CacheEntry
from feedcache.core.config import Config
from feedcache.core.errors import PersistenceError
from feedcache.feeds.normalize import build_cache_key
from feedcache.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_CACHE_DIR = Path("data/cache")


def write_json_atomic(path: Path, payload: Any) -> None:
    """Persist *payload* to *path* via a temp file and ``os.replace``."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", suffix=".json", dir=path.parent)
    except OSError as exc:
        raise PersistenceError(f"Cannot prepare {path}: {exc}", path=str(path), operation="write") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
            json.dump(payload, tmp_file, indent=2, sort_keys=True)
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as exc:
        raise PersistenceError(f"Failed to write {path}: {exc}", path=str(path), operation="write") from exc
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)


def read_json(path: Path) -> Optional[Any]:
    """Return the decoded document, or ``None`` when missing or unreadable."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (json.JSONDecodeError, OSError) as exc:
        log.warning("Ignoring unreadable {}: {}", path, exc)
        return None


class CacheStore:
    """Key-value store of the latest CacheEntry per feed."""

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self.base_dir = Path(base_dir or Config.get("storage", "cache_dir", default=DEFAULT_CACHE_DIR))

    def path_for(self, feed_url: str) -> Path:
        return self.base_dir / f"{build_cache_key(feed_url)}.json"

    def read(self, feed_url: str) -> Optional[CacheEntry]:
        payload = read_json(self.path_for(feed_url))
        if not isinstance(payload, dict):
            return None
        try:
            return CacheEntry.from_dict(payload)
        except (TypeError, ValueError) as exc:
            log.warning("Discarding malformed cache entry for {}: {}", feed_url, exc)
            return None

    def write(self, feed_url: str, entry: CacheEntry) -> None:
        path = self.path_for(feed_url)
        write_json_atomic(path, entry.to_dict())
        log.debug("Cached {} items for {} (error={}, ttl={}s)", len(entry.items), feed_url, entry.error, entry.ttl)


__all__ = ["CacheStore", "write_json_atomic", "read_json"]
