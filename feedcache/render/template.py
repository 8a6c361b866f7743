"""Token templating for cached feed items.

Rendering is two stages: tokens are substituted into the author's template,
then the assembled string goes through the tag allow-list. The second stage
always runs because the template text itself is author-controlled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from models.feed import FeedItem
from feedcache.render.sanitizer import ALLOWED_TAGS, POST_ALLOWED_TAGS, AllowList, sanitize_html
from feedcache.utils.cleaner import escape_html, escape_url, strip_all_tags

ELLIPSIS = "…"
TITLE_LINK_TOKEN = "{title_link}"
_WHITESPACE_RE = re.compile(r"\s+")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _as_int(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


@dataclass(slots=True)
class RenderOptions:
    allow_html: bool = False
    trim_chars: int = 0
    trim_words: int = 0
    new_tab: bool = False
    nofollow: bool = False

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "RenderOptions":
        options = options or {}
        return cls(
            allow_html=_as_bool(options.get("allow_html", False)),
            trim_chars=_as_int(options.get("trim_chars", 0)),
            trim_words=_as_int(options.get("trim_words", 0)),
            new_tab=_as_bool(options.get("new_tab", False)),
            nofollow=_as_bool(options.get("nofollow", False)),
        )


def substitute_tokens(template: str, replacements: Mapping[str, str]) -> str:
    """Replace every token in one pass; inserted values are never re-scanned."""
    if not template or not replacements:
        return template or ""
    keys = sorted(replacements, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(key) for key in keys))
    return pattern.sub(lambda match: replacements[match.group(0)], template)


class TemplateRenderer:
    """Renders ``{title}``, ``{link}``, ``{description}``, ``{date}`` and
    ``{title_link}`` for one feed item."""

    def __init__(self, allowed_tags: AllowList = ALLOWED_TAGS, description_tags: AllowList = POST_ALLOWED_TAGS):
        self.allowed_tags = allowed_tags
        self.description_tags = description_tags

    def render(
        self,
        template: str,
        item: Union[FeedItem, Mapping[str, Any]],
        options: Union[RenderOptions, Mapping[str, Any], None] = None,
    ) -> str:
        if not isinstance(item, FeedItem):
            item = FeedItem.from_dict(item)
        if not isinstance(options, RenderOptions):
            options = RenderOptions.from_mapping(options)

        replacements: Dict[str, str] = {
            "{title}": escape_html(strip_all_tags(item.title)),
            "{link}": escape_url(item.link),
            "{description}": self.process_description(item.description, options),
            "{date}": escape_html(item.date),
        }
        if TITLE_LINK_TOKEN in template:
            replacements[TITLE_LINK_TOKEN] = self.title_link(item, options)

        return sanitize_html(substitute_tokens(template, replacements), self.allowed_tags)

    def process_description(self, description: str, options: RenderOptions) -> str:
        """Sanitize, then trim by characters or (failing that) by words.

        Character trimming works on the sanitized text, so with ``allow_html``
        it can cut through a tag; the final allow-list pass closes or drops
        what is left over.
        """
        if options.allow_html:
            text = sanitize_html(description or "", self.description_tags)
            is_markup = True
        else:
            text = strip_all_tags(description)
            is_markup = False

        if options.trim_chars > 0:
            limit = options.trim_chars
            if len(text) > limit:
                text = text[:limit] + ELLIPSIS
        elif options.trim_words > 0:
            words = _WHITESPACE_RE.split(strip_all_tags(text))
            if len(words) > options.trim_words:
                text = " ".join(words[: options.trim_words]) + ELLIPSIS
                is_markup = False

        return text if is_markup else escape_html(text)

    def title_link(self, item: FeedItem, options: RenderOptions) -> str:
        href = escape_url(item.link) or "#"
        attrs = [f'href="{href}"']
        rel = []
        if options.new_tab:
            attrs.append('target="_blank"')
            rel.append("noopener")
        if options.nofollow:
            rel.append("nofollow")
        if rel:
            attrs.append(f'rel="{" ".join(rel)}"')
        title = escape_html(strip_all_tags(item.title))
        return f"<a {' '.join(attrs)}>{title}</a>"


__all__ = ["RenderOptions", "TemplateRenderer", "substitute_tokens", "ELLIPSIS"]
