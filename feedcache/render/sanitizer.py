"""Declarative tag/attribute allow-list filter for rendered HTML.

The allow-lists are plain mappings of tag name to the attribute names that
tag may keep. Anything else is stripped:

- tags not listed are unwrapped (their text and allowed children survive)
- ``script``/``style``/``iframe``-like elements are removed with their content
- comments, doctypes and processing instructions are removed
- unlisted attributes are dropped (``onclick``, ``style``, ...)
- URL attributes whose scheme is not allowed are dropped
"""

from __future__ import annotations

from typing import FrozenSet, Mapping

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

from feedcache.utils.cleaner import sanitize_url

AllowList = Mapping[str, FrozenSet[str]]

_NONE: FrozenSet[str] = frozenset()
_CLASS: FrozenSet[str] = frozenset({"class"})

ALLOWED_TAGS: AllowList = {
    "a": frozenset({"href", "target", "rel"}),
    "p": _NONE,
    "span": _CLASS,
    "strong": _NONE,
    "em": _NONE,
    "b": _NONE,
    "i": _NONE,
    "br": _NONE,
    "ul": _NONE,
    "ol": _NONE,
    "li": _NONE,
    "div": _CLASS,
    "h1": _NONE,
    "h2": _NONE,
    "h3": _NONE,
    "h4": _NONE,
    "h5": _NONE,
    "h6": _NONE,
}

# Wider set used for descriptions when markup is allowed, roughly what a
# blog post body may contain.
POST_ALLOWED_TAGS: AllowList = {
    **ALLOWED_TAGS,
    "a": frozenset({"href", "target", "rel", "title"}),
    "abbr": frozenset({"title"}),
    "blockquote": frozenset({"cite"}),
    "cite": _NONE,
    "code": _NONE,
    "del": _NONE,
    "figcaption": _NONE,
    "figure": _NONE,
    "hr": _NONE,
    "img": frozenset({"src", "alt", "title", "width", "height"}),
    "pre": _NONE,
    "q": frozenset({"cite"}),
    "s": _NONE,
    "small": _NONE,
    "sub": _NONE,
    "sup": _NONE,
    "table": _NONE,
    "tbody": _NONE,
    "td": _NONE,
    "th": _NONE,
    "thead": _NONE,
    "tr": _NONE,
    "u": _NONE,
}

DROP_WITH_CONTENT = ["script", "style", "iframe", "object", "embed", "noscript", "template"]
URL_ATTRIBUTES = frozenset({"href", "src", "cite"})


def sanitize_html(markup: str, allowed_tags: AllowList = ALLOWED_TAGS) -> str:
    if not markup:
        return ""

    soup = BeautifulSoup(markup, "html.parser")

    for node in soup.find_all(string=lambda text: isinstance(text, PreformattedString)):
        node.extract()

    element = soup.find(DROP_WITH_CONTENT)
    while element is not None:
        element.decompose()
        element = soup.find(DROP_WITH_CONTENT)

    for tag in soup.find_all(True):
        allowed_attrs = allowed_tags.get(tag.name)
        if allowed_attrs is None:
            tag.unwrap()
            continue

        for attr in list(tag.attrs):
            if attr not in allowed_attrs:
                del tag[attr]
                continue
            if attr in URL_ATTRIBUTES:
                safe = sanitize_url(tag[attr])
                if safe:
                    tag[attr] = safe
                else:
                    del tag[attr]

    return str(soup)


__all__ = ["ALLOWED_TAGS", "POST_ALLOWED_TAGS", "sanitize_html"]
