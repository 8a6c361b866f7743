"""Domain model for parsed feed items and their cached payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

SUCCESS_TTL_SECONDS = 60 * 60
ERROR_TTL_SECONDS = 10 * 60


@dataclass(slots=True)
class FeedItem:
    """A single RSS ``<item>`` or Atom ``<entry>`` in normalised form."""

    title: str = ""
    link: str = ""
    description: str = ""
    date: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "FeedItem":
        return cls(
            title=str(payload.get("title") or ""),
            link=str(payload.get("link") or ""),
            description=str(payload.get("description") or ""),
            date=str(payload.get("date") or ""),
        )


@dataclass(slots=True)
class CacheEntry:
    """Result of one fetch attempt as stored for a feed."""

    fetched_at: int
    items: List[FeedItem] = field(default_factory=list)
    error: Optional[str] = None
    ttl: int = SUCCESS_TTL_SECONDS

    def __post_init__(self) -> None:
        self.fetched_at = int(self.fetched_at)
        self.ttl = int(self.ttl)
        self.items = _load_items(self.items)
        if self.error is not None:
            self.error = str(self.error)

    @property
    def has_items(self) -> bool:
        return bool(self.items)

    @property
    def has_error(self) -> bool:
        return bool(self.error)

    @classmethod
    def success(cls, items: Iterable[FeedItem], *, fetched_at: int, ttl: int = SUCCESS_TTL_SECONDS) -> "CacheEntry":
        return cls(fetched_at=fetched_at, items=list(items), error=None, ttl=ttl)

    @classmethod
    def failure(cls, message: str, *, fetched_at: int, ttl: int = ERROR_TTL_SECONDS) -> "CacheEntry":
        return cls(fetched_at=fetched_at, items=[], error=message, ttl=ttl)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fetched_at": self.fetched_at,
            "error": self.error,
            "items": [item.to_dict() for item in self.items],
            "ttl": self.ttl,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CacheEntry":
        return cls(
            fetched_at=int(payload.get("fetched_at", 0) or 0),
            items=_load_items(payload.get("items", [])),
            error=payload.get("error") or None,
            ttl=int(payload.get("ttl", SUCCESS_TTL_SECONDS) or 0),
        )


def _load_items(items: Iterable[Any]) -> List[FeedItem]:
    loaded: List[FeedItem] = []
    for item in items or []:
        if isinstance(item, FeedItem):
            loaded.append(item)
        elif isinstance(item, Mapping):
            loaded.append(FeedItem.from_dict(item))
    return loaded


__all__ = ["FeedItem", "CacheEntry", "SUCCESS_TTL_SECONDS", "ERROR_TTL_SECONDS"]
