"""Model exports for the feed cache."""

from .feed import ERROR_TTL_SECONDS, SUCCESS_TTL_SECONDS, CacheEntry, FeedItem
from .registry import (
    DEFAULT_CACHE_MINUTES,
    MIN_CACHE_MINUTES,
    RegistryRecord,
    clamp_cache_minutes,
)

__all__ = [
    "CacheEntry",
    "FeedItem",
    "SUCCESS_TTL_SECONDS",
    "ERROR_TTL_SECONDS",
    "RegistryRecord",
    "clamp_cache_minutes",
    "MIN_CACHE_MINUTES",
    "DEFAULT_CACHE_MINUTES",
]
