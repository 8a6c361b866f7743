"""
Feed Fetcher
============

HTTP client for pulling RSS/Atom documents:
- Synchronous requests via httpx
- Descriptive User-Agent
- Per-call timeout
- Typed failures converted to a textual error at the boundary
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import httpx

from models.feed import FeedItem
from feedcache import __version__
from feedcache.core.config import Config
from feedcache.core.errors import BadStatusError, EmptyBodyError, FeedError, FeedFetchError
from feedcache.feeds.parser import parse_feed
from feedcache.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_USER_AGENT = f"feedcache/{__version__} (+feed cache refresher)"
DEFAULT_TIMEOUT_SECONDS = 8.0


@dataclass(slots=True)
class FetchResult:
    items: List[FeedItem] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self) -> Iterator:
        return iter((self.items, self.error))


class FeedFetcher:
    """
    Fetches and parses feeds. ``fetch`` never raises feed errors; they come
    back as ``FetchResult.error``.
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.user_agent = user_agent or Config.get("fetcher", "user_agent", default=DEFAULT_USER_AGENT)
        self._owns_client = client is None
        self.client = client or httpx.Client(
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=transport,
        )

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def download(self, url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> bytes:
        """
        GET the feed body.

        Raises:
            FeedFetchError: network failure, timeout or malformed URL
            BadStatusError: non-2xx response
            EmptyBodyError: 2xx response without a body
        """
        try:
            response = self.client.get(url, timeout=timeout, headers={"User-Agent": self.user_agent})
        except httpx.TimeoutException as exc:
            raise FeedFetchError(f"Timed out after {timeout:g}s", feed_url=url) from exc
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise FeedFetchError(f"Invalid feed URL: {exc}", feed_url=url) from exc
        except httpx.RequestError as exc:
            raise FeedFetchError(f"Request failed: {exc}", feed_url=url) from exc

        if not 200 <= response.status_code < 300:
            raise BadStatusError(
                f"Feed returned HTTP {response.status_code}",
                status_code=response.status_code,
                feed_url=url,
            )

        body = response.content
        if not body or not body.strip():
            raise EmptyBodyError("Empty feed body", feed_url=url)
        return body

    def fetch(self, url: str, limit: int = 30, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> FetchResult:
        try:
            body = self.download(url, timeout=timeout)
            items = parse_feed(body, limit=limit)
        except FeedError as exc:
            log.warning("Feed fetch failed for {}: {} ({})", url, exc.message, type(exc).__name__)
            return FetchResult(items=[], error=exc.message)

        log.debug("Fetched {} items from {}", len(items), url)
        return FetchResult(items=items, error=None)


__all__ = ["FeedFetcher", "FetchResult", "DEFAULT_USER_AGENT"]
