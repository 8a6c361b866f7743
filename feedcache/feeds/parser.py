"""RSS/Atom document parsing into normalised FeedItem lists."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Iterable, List, Optional, Union

from models.feed import FeedItem
from feedcache.core.errors import FeedParseError
from feedcache.utils.cleaner import sanitize_url, strip_all_tags


def _local(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _children(elem: ET.Element, name: str) -> Iterable[ET.Element]:
    return (child for child in elem if _local(child.tag) == name)


def _first(elem: ET.Element, *names: str) -> Optional[ET.Element]:
    """First child matching the earliest name in *names* that is present."""
    for name in names:
        for child in _children(elem, name):
            return child
    return None


def _inner_text(elem: Optional[ET.Element]) -> str:
    """Text of *elem* including any nested markup (e.g. XHTML content)."""
    if elem is None:
        return ""
    parts = [elem.text or ""]
    for child in elem:
        parts.append(ET.tostring(child, encoding="unicode"))
    return "".join(parts)


def _rss_item(item: ET.Element) -> FeedItem:
    return FeedItem(
        title=strip_all_tags(_inner_text(_first(item, "title"))),
        link=sanitize_url(_inner_text(_first(item, "link"))),
        description=_inner_text(_first(item, "description")),
        date=_inner_text(_first(item, "pubDate", "date")).strip(),
    )


def _atom_link(entry: ET.Element) -> str:
    href = ""
    for link in _children(entry, "link"):
        rel = link.get("rel", "alternate")
        candidate = link.get("href")
        if candidate is not None and (rel == "alternate" or not href):
            href = candidate
    return href


def _atom_entry(entry: ET.Element) -> FeedItem:
    return FeedItem(
        title=strip_all_tags(_inner_text(_first(entry, "title"))),
        link=sanitize_url(_atom_link(entry)),
        description=_inner_text(_first(entry, "summary", "content")),
        date=_inner_text(_first(entry, "updated", "published")).strip(),
    )


def parse_feed(body: Union[str, bytes], limit: int = 30) -> List[FeedItem]:
    """
    Parse an RSS 2.0, Atom or RSS 1.0 document.

    RSS ``channel/item`` wins when present; otherwise Atom ``entry``
    children of the root are used, then RSS 1.0 ``item`` siblings of the
    channel. At most *limit* items are returned.

    Raises:
        FeedParseError: the body is not well-formed XML
    """
    try:
        root = ET.fromstring(body)
    except (ET.ParseError, ValueError) as exc:
        raise FeedParseError("Failed to parse XML", details={"reason": str(exc)}) from exc

    limit = max(int(limit), 0)

    channel = _first(root, "channel")
    rss_items = list(_children(channel, "item")) if channel is not None else []
    if rss_items:
        return [_rss_item(item) for item in rss_items[:limit]]

    entries = list(_children(root, "entry"))
    if entries:
        return [_atom_entry(entry) for entry in entries[:limit]]

    return [_rss_item(item) for item in list(_children(root, "item"))[:limit]]


__all__ = ["parse_feed"]
