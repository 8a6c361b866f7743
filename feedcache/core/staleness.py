"""Staleness evaluation for cached feed payloads."""

from __future__ import annotations

import time
from typing import Optional

from models.feed import CacheEntry


def is_stale(entry: Optional[CacheEntry], cache_ttl_seconds: int = 0, *, now: Optional[float] = None) -> bool:
    """Return True when *entry* should be refetched.

    An entry is stale when it is missing, carries an error, or is at least
    ``entry.ttl`` seconds old. The decision uses the TTL stored with the
    payload; ``cache_ttl_seconds`` (the registry's configured lifetime) is
    accepted but does not take part.
    """
    if entry is None:
        return True
    if entry.error:
        return True
    now = time.time() if now is None else now
    return (now - entry.fetched_at) >= entry.ttl


def describe_staleness(entry: Optional[CacheEntry], *, now: Optional[float] = None) -> str:
    if entry is None:
        return "never fetched"
    if entry.error:
        return f"cached error: {entry.error}"
    now = time.time() if now is None else now
    age = int(now - entry.fetched_at)
    if age >= entry.ttl:
        return f"stale by {age - entry.ttl}s"
    return f"fresh (next refresh in {entry.ttl - age}s)"


__all__ = ["is_stale", "describe_staleness"]
