"""Embeddable feed widget: display settings plus the HTML they produce."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from feedcache.render.sanitizer import sanitize_html
from feedcache.render.template import RenderOptions, TemplateRenderer, substitute_tokens
from feedcache.utils.cleaner import escape_html
from feedcache.utils.logger import get_logger

if TYPE_CHECKING:
    from feedcache.core.engine import RefreshEngine

log = get_logger(__name__)

DEFAULT_ITEM_WRAPPER_TEMPLATE = '<div class="feed-item">\n{title_block}\n{description_block}\n</div>'
DEFAULT_TITLE_TEMPLATE = '<h3 class="feed-title">{title_link}</h3>'
DEFAULT_DESCRIPTION_TEMPLATE = '<div class="feed-desc">{description}</div>'
DEFAULT_CONTAINER_CLASS = "feed-widget"

CONTAINER_TAGS = ("div", "section", "ul", "ol")
TRIM_MODES = ("", "words", "chars")

MISSING_URL_HINT = '<em class="feed-hint">Set a Feed URL to display items.</em>'
EMPTY_CACHE_HINT = (
    '<div class="feed-msg">No cached items yet. The background scan will populate this shortly.</div>'
)

_CLASS_RE = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_class(value: Optional[str]) -> str:
    return _CLASS_RE.sub("", value or "")


@dataclass(slots=True)
class FeedWidget:
    feed_url: str = ""
    items: int = 5
    cache_minutes: int = 60
    item_wrapper_template: str = DEFAULT_ITEM_WRAPPER_TEMPLATE
    title_template: str = DEFAULT_TITLE_TEMPLATE
    description_template: str = DEFAULT_DESCRIPTION_TEMPLATE
    strip_html: bool = True
    trim_mode: str = "words"
    trim_amount: int = 40
    links_new_tab: bool = True
    links_nofollow: bool = False
    container_tag: str = "div"
    container_class: str = DEFAULT_CONTAINER_CLASS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeedWidget":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known and value is not None})

    def render_options(self) -> RenderOptions:
        trim_mode = self.trim_mode if self.trim_mode in TRIM_MODES else ""
        try:
            amount = max(int(self.trim_amount), 0)
        except (TypeError, ValueError):
            amount = 0
        return RenderOptions(
            allow_html=not self.strip_html,
            trim_words=amount if trim_mode == "words" else 0,
            trim_chars=amount if trim_mode == "chars" else 0,
            new_tab=bool(self.links_new_tab),
            nofollow=bool(self.links_nofollow),
        )

    @property
    def tag(self) -> str:
        return self.container_tag if self.container_tag in CONTAINER_TAGS else "div"

    @property
    def css_class(self) -> str:
        return sanitize_class(self.container_class) or DEFAULT_CONTAINER_CLASS


def render_widget(
    widget: FeedWidget,
    engine: "RefreshEngine",
    renderer: TemplateRenderer,
    *,
    editing: bool = False,
    privileged: bool = False,
    register: bool = True,
) -> str:
    """
    Render *widget* from the cache.

    With *register* the feed is added to the registry so the scheduled scan
    picks it up; pass False when the URL comes from an untrusted caller.
    Network access only happens in *editing* mode for privileged callers and
    only when nothing is cached yet.
    """
    feed_url = (widget.feed_url or "").strip()
    if not feed_url:
        return MISSING_URL_HINT if privileged else ""

    if register:
        engine.registry.register(feed_url, widget.cache_minutes)
    cached = engine.get_cached(
        feed_url,
        widget.items,
        widget.cache_minutes,
        warm_if_empty=editing,
        privileged=privileged,
    )

    options = widget.render_options()
    title_template = widget.title_template or DEFAULT_TITLE_TEMPLATE
    description_template = widget.description_template or DEFAULT_DESCRIPTION_TEMPLATE
    wrapper_template = widget.item_wrapper_template or DEFAULT_ITEM_WRAPPER_TEMPLATE

    parts: List[str] = [f'<{widget.tag} class="{escape_html(widget.css_class)}">']

    if not cached.items and privileged:
        if cached.error:
            parts.append(f'<div class="feed-msg feed-error">Feed error: {escape_html(cached.error)}</div>')
        else:
            parts.append(EMPTY_CACHE_HINT)

    for item in cached.items:
        blocks: Dict[str, str] = {
            "{title_block}": renderer.render(title_template, item, options),
            "{description_block}": renderer.render(description_template, item, options),
        }
        parts.append(sanitize_html(substitute_tokens(wrapper_template, blocks), renderer.allowed_tags))

    parts.append(f"</{widget.tag}>")
    log.debug("Rendered {} items for {}", len(cached.items), feed_url)
    return "".join(parts)


__all__ = ["FeedWidget", "render_widget", "sanitize_class", "CONTAINER_TAGS"]
