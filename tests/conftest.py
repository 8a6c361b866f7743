from typing import Dict, List, Optional

import pytest
from loguru import logger

from feedcache.utils.logger import setup_logging

# Console only; keeps test runs from writing ./logs.
setup_logging(
    {
        "level": "DEBUG",
        "console": {"enabled": True, "colorize": False},
        "file": {"enabled": False},
        "error_file": {"enabled": False},
        "json": {"enabled": False},
    }
)

from models.feed import CacheEntry, FeedItem  # noqa: E402
from feedcache.core.engine import RefreshEngine  # noqa: E402
from feedcache.core.fetcher import FetchResult  # noqa: E402
from feedcache.core.registry import FeedRegistry  # noqa: E402
from feedcache.core.storage import CacheStore  # noqa: E402
from feedcache.render.template import TemplateRenderer  # noqa: E402

NOW = 1_700_000_000


class FakeClock:
    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class FakeFetcher:
    """Records every fetch; answers from ``responses`` or the default result."""

    def __init__(self, items: Optional[List[FeedItem]] = None, error: Optional[str] = None):
        self.default = FetchResult(items=list(items or []), error=error)
        self.responses: Dict[str, object] = {}
        self.calls: List[tuple] = []

    def fetch(self, url, limit=30, timeout=8.0):
        self.calls.append((url, limit, timeout))
        result = self.responses.get(url, self.default)
        if isinstance(result, Exception):
            raise result
        return FetchResult(items=list(result.items)[:limit], error=result.error)

    @property
    def urls(self) -> List[str]:
        return [call[0] for call in self.calls]

    def close(self) -> None:
        pass


def make_items(count: int = 3, prefix: str = "Item") -> List[FeedItem]:
    return [
        FeedItem(
            title=f"{prefix} {index}",
            link=f"https://example.com/posts/{index}",
            description=f"<p>Body of {prefix.lower()} {index}</p>",
            date="Mon, 01 Jan 2024 00:00:00 +0000",
        )
        for index in range(1, count + 1)
    ]


def cached(items=None, *, fetched_at: int = NOW, error=None, ttl: int = 3600) -> CacheEntry:
    return CacheEntry(fetched_at=fetched_at, items=list(items or []), error=error, ttl=ttl)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return FakeFetcher(items=make_items(5))


@pytest.fixture
def registry(tmp_path):
    return FeedRegistry(tmp_path / "system" / "feed_registry.json")


@pytest.fixture
def store(tmp_path):
    return CacheStore(tmp_path / "cache")


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "system" / "last_scan.json"


@pytest.fixture
def engine(registry, store, fetcher, clock, state_path):
    return RefreshEngine(registry, store, fetcher, clock=clock, state_path=state_path)


@pytest.fixture
def renderer():
    return TemplateRenderer()


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
