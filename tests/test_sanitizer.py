from feedcache.render.sanitizer import POST_ALLOWED_TAGS, sanitize_html
from feedcache.utils.cleaner import escape_url, sanitize_url, strip_all_tags


def test_disallowed_attributes_are_dropped():
    assert sanitize_html('<p onclick="steal()" style="x">Hi</p>') == "<p>Hi</p>"
    assert sanitize_html('<span class="tag" id="t">x</span>') == '<span class="tag">x</span>'


def test_disallowed_tags_are_unwrapped():
    assert sanitize_html("<font color='red'>Text</font>") == "Text"
    assert sanitize_html('<div class="c"><section><b>t</b></section></div>') == '<div class="c"><b>t</b></div>'


def test_script_style_and_comments_are_removed():
    markup = "<style>p{}</style><p>a</p><script>alert(1)</script><!-- note --><iframe src='x'>f</iframe>"
    assert sanitize_html(markup) == "<p>a</p>"


def test_unsafe_href_is_dropped():
    assert sanitize_html('<a href="javascript:alert(1)">x</a>') == "<a>x</a>"
    assert sanitize_html('<a href="https://ok.example/">x</a>') == '<a href="https://ok.example/">x</a>'


def test_post_allow_list_keeps_images():
    out = sanitize_html('<p><img src="https://example.com/i.png" onerror="x()" alt="i"></p>', POST_ALLOWED_TAGS)
    assert 'src="https://example.com/i.png"' in out
    assert "onerror" not in out


def test_strip_all_tags():
    assert strip_all_tags("<p>Hello <b>world</b></p><script>bad()</script>") == "Hello world"
    assert strip_all_tags("Fish &amp; chips ") == "Fish & chips"
    assert strip_all_tags(None) == ""


def test_sanitize_url():
    assert sanitize_url("javascript:alert(1)") == ""
    assert sanitize_url("DATA:text/html;base64,xx") == ""
    assert sanitize_url("example.com/a b") == "http://example.com/a%20b"
    assert sanitize_url("/relative") == "/relative"
    assert sanitize_url("https://example.com/<x>") == "https://example.com/x"


def test_escape_url():
    assert escape_url("https://example.com/?a=1&b=2") == "https://example.com/?a=1&amp;b=2"
