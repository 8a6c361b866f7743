import html
import re
from typing import Any

from bs4 import BeautifulSoup

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
_URL_DISALLOWED_RE = re.compile(r"[^a-zA-Z0-9\-~+_.?#=!&;,/:%@$|*'()\[\]\u0080-\uffff]")

ALLOWED_URL_SCHEMES = frozenset({
    "http", "https", "ftp", "ftps", "mailto", "news", "irc", "gopher", "nntp",
    "feed", "telnet", "mms", "rtsp", "sms", "svn", "tel", "fax", "xmpp", "webcal", "urn",
})


class TextCleaner:
    """
    Utility class for cleaning text and URLs pulled out of feeds.
    """

    @staticmethod
    def strip_all_tags(value: Any) -> str:
        """
        Removes every tag, dropping <script>/<style> bodies entirely.
        Entities are decoded; the result is plain text, trimmed.
        """
        if value is None:
            return ""
        text = str(value)
        if "<" not in text:
            return html.unescape(text).strip()

        soup = BeautifulSoup(text, "html.parser")
        for element in soup(["script", "style"]):
            element.decompose()
        return soup.get_text().strip()

    @staticmethod
    def sanitize_url(value: Any) -> str:
        """
        Normalises a URL for storage or output.

        Spaces are percent-encoded, characters that never belong in a URL are
        dropped, bare hosts get an ``http://`` prefix and anything with a
        scheme outside ``ALLOWED_URL_SCHEMES`` (``javascript:``, ``data:``)
        collapses to an empty string.
        """
        if value is None:
            return ""
        url = str(value).strip().replace(" ", "%20")
        url = _URL_DISALLOWED_RE.sub("", url)
        if not url:
            return ""

        match = _SCHEME_RE.match(url)
        if match:
            if match.group(1).lower() not in ALLOWED_URL_SCHEMES:
                return ""
            return url

        if url[0] in "/#?":
            return url
        return f"http://{url}"

    @staticmethod
    def escape_html(value: Any) -> str:
        if value is None:
            return ""
        return html.escape(str(value), quote=True)

    @classmethod
    def escape_url(cls, value: Any) -> str:
        """Sanitized URL, escaped for use inside an HTML attribute."""
        return html.escape(cls.sanitize_url(value), quote=True)


strip_all_tags = TextCleaner.strip_all_tags
sanitize_url = TextCleaner.sanitize_url
escape_html = TextCleaner.escape_html
escape_url = TextCleaner.escape_url
