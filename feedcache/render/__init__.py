"""Template rendering and HTML allow-list filtering."""

from .sanitizer import ALLOWED_TAGS, POST_ALLOWED_TAGS, sanitize_html
from .template import RenderOptions, TemplateRenderer, substitute_tokens
from .widget import FeedWidget, render_widget

__all__ = [
    "ALLOWED_TAGS",
    "POST_ALLOWED_TAGS",
    "sanitize_html",
    "RenderOptions",
    "TemplateRenderer",
    "substitute_tokens",
    "FeedWidget",
    "render_widget",
]
