"""Normalisation helpers for feed identifiers."""

from __future__ import annotations

import hashlib

CACHE_KEY_PREFIX = "feed_cache_"


def normalise_feed_url(raw: str | None) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def normalise_feed_id(raw: str | None) -> str:
    return normalise_feed_url(raw).casefold()


def build_cache_key(raw: str | None) -> str:
    feed_id = normalise_feed_id(raw)
    if not feed_id:
        raise ValueError("Feed URL is required")
    digest = hashlib.md5(feed_id.encode("utf-8")).hexdigest()
    return f"{CACHE_KEY_PREFIX}{digest}"


__all__ = ["normalise_feed_url", "normalise_feed_id", "build_cache_key", "CACHE_KEY_PREFIX"]
