"""
Feed cache error hierarchy for clear classification in logs and API responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class FeedCacheError(Exception):
    """Base class for all feed cache errors."""

    def __init__(
        self,
        message: str,
        *,
        feed_url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.feed_url = feed_url
        self.details = details or {}

    def as_dict(self) -> Dict[str, Any]:
        """Serializable representation for logs/API."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "feed_url": self.feed_url,
            "details": self.details,
        }


class FeedError(FeedCacheError):
    """Raised while fetching or parsing a remote feed.

    Never crosses the fetcher boundary: ``FeedFetcher.fetch`` turns it into
    the error string stored on the cache entry.
    """


class FeedFetchError(FeedError):
    """Network failure or timeout."""


class BadStatusError(FeedError):
    """Feed answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        if status_code is not None:
            self.details["status_code"] = status_code


class EmptyBodyError(FeedError):
    """Feed answered 2xx with nothing in the body."""


class FeedParseError(FeedError):
    """Body is not a well-formed RSS/Atom document."""


class PersistenceError(FeedCacheError):
    """Raised during read/write of the registry, cache store or state files."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.path = path
        self.operation = operation
        if path is not None:
            self.details["path"] = path
        if operation is not None:
            self.details["operation"] = operation


class ConfigError(FeedCacheError):
    """Raised on missing/invalid configuration values."""

    def __init__(
        self,
        message: str,
        *,
        key: Optional[str] = None,
        section: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.key = key
        self.section = section
        if key is not None:
            self.details["key"] = key
        if section is not None:
            self.details["section"] = section


class ScanInProgressError(FeedCacheError):
    """Raised when a registry scan is requested while another is running."""
