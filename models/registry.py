"""Domain model for the watched-feed registry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

MIN_CACHE_MINUTES = 5
DEFAULT_CACHE_MINUTES = 60


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def clamp_cache_minutes(value: Any) -> int:
    """Coerce *value* to whole minutes, never below ``MIN_CACHE_MINUTES``."""
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        minutes = 0
    return max(MIN_CACHE_MINUTES, minutes)


@dataclass(slots=True)
class RegistryRecord:
    """A feed some consumer asked to keep cached."""

    feed_id: str
    feed_url: str
    cache_minutes: int = DEFAULT_CACHE_MINUTES
    last_seen: Optional[str] = None

    def __post_init__(self) -> None:
        self.feed_url = self.feed_url.strip()
        self.feed_id = self.feed_id.strip().casefold()
        self.cache_minutes = clamp_cache_minutes(self.cache_minutes)

    @property
    def cache_ttl_seconds(self) -> int:
        return self.cache_minutes * 60

    def touch_seen(self, *, timestamp: Optional[str] = None) -> None:
        self.last_seen = timestamp or _utc_now_iso()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feed_id": self.feed_id,
            "feed_url": self.feed_url,
            "cache_minutes": self.cache_minutes,
            "last_seen": self.last_seen,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RegistryRecord":
        feed_url = str(payload.get("feed_url") or payload.get("feed_id") or "")
        return cls(
            feed_id=str(payload.get("feed_id") or feed_url),
            feed_url=feed_url,
            cache_minutes=payload.get("cache_minutes", DEFAULT_CACHE_MINUTES),
            last_seen=payload.get("last_seen"),
        )


__all__ = [
    "RegistryRecord",
    "clamp_cache_minutes",
    "MIN_CACHE_MINUTES",
    "DEFAULT_CACHE_MINUTES",
]
