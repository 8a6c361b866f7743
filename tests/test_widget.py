from feedcache.core.fetcher import FetchResult
from feedcache.render.widget import FeedWidget, render_widget, sanitize_class

from conftest import cached, make_items

FEED = "https://example.com/feed"


def test_blank_url_hint_only_for_privileged(engine, renderer, registry):
    widget = FeedWidget(feed_url="   ")

    assert render_widget(widget, engine, renderer) == ""
    assert "Set a Feed URL" in render_widget(widget, engine, renderer, privileged=True)
    assert len(registry) == 0


def test_render_registers_feed_without_fetching(engine, renderer, registry, fetcher):
    html = render_widget(FeedWidget(feed_url=FEED, cache_minutes=15), engine, renderer)

    assert html == '<div class="feed-widget"></div>'
    assert registry.get(FEED).cache_minutes == 15
    assert fetcher.calls == []


def test_render_without_registering(engine, renderer, registry, store):
    store.write(FEED, cached(make_items(1)))

    html = render_widget(FeedWidget(feed_url=FEED), engine, renderer, register=False)

    assert "Item 1" in html
    assert len(registry) == 0


def test_empty_cache_messages_for_privileged(engine, renderer, store):
    widget = FeedWidget(feed_url=FEED)
    assert "No cached items yet" in render_widget(widget, engine, renderer, privileged=True)

    store.write(FEED, cached(error="Feed returned HTTP 500"))
    html = render_widget(widget, engine, renderer, privileged=True)
    assert "Feed error: Feed returned HTTP 500" in html


def test_renders_cached_items(engine, renderer, store):
    store.write(FEED, cached(make_items(4)))
    widget = FeedWidget(feed_url=FEED, items=2, links_nofollow=True)

    html = render_widget(widget, engine, renderer)

    assert html.count('<div class="feed-item">') == 2
    assert '<a href="https://example.com/posts/1" target="_blank" rel="noopener nofollow">Item 1</a>' in html
    assert "Body of item 2" in html
    assert "Item 3" not in html


def test_wrapper_template_is_filtered(engine, renderer, store):
    store.write(FEED, cached(make_items(1)))
    widget = FeedWidget(
        feed_url=FEED,
        item_wrapper_template='<li onclick="x()">{title_block}<script>bad()</script>{description_block}</li>',
        title_template="<strong>{title}</strong>",
        description_template="<em>{description}</em>",
        container_tag="ul",
    )

    html = render_widget(widget, engine, renderer)

    assert html == '<ul class="feed-widget"><li><strong>Item 1</strong><em>Body of item 1</em></li></ul>'


def test_container_tag_and_class_are_restricted(engine, renderer):
    widget = FeedWidget(feed_url=FEED, container_tag="script", container_class='bad class"><x')

    html = render_widget(widget, engine, renderer)

    assert html == '<div class="badclassx"></div>'


def test_trim_settings_map_to_render_options():
    widget = FeedWidget(strip_html=False, trim_mode="chars", trim_amount=12, links_new_tab=False)
    options = widget.render_options()

    assert options.allow_html
    assert (options.trim_chars, options.trim_words) == (12, 0)
    assert not options.new_tab

    assert FeedWidget(trim_mode="sideways").render_options().trim_words == 0


def test_editing_warms_empty_cache_for_privileged(engine, renderer, store, fetcher):
    widget = FeedWidget(feed_url=FEED, items=3)

    html = render_widget(widget, engine, renderer, editing=True, privileged=True)

    assert html.count('<div class="feed-item">') == 3
    assert store.read(FEED) is not None
    assert fetcher.calls == [(FEED, 3, 4)]


def test_editing_warm_failure_shows_error(engine, renderer, store, fetcher):
    fetcher.default = FetchResult(error="Timed out after 4s")

    html = render_widget(FeedWidget(feed_url=FEED), engine, renderer, editing=True, privileged=True)

    assert "Feed error: Timed out after 4s" in html
    assert store.read(FEED) is None


def test_from_dict_ignores_unknown_and_missing_values():
    widget = FeedWidget.from_dict({"feed_url": FEED, "items": 3, "title_template": None, "colour": "red"})
    assert widget.items == 3
    assert widget.title_template == FeedWidget().title_template


def test_sanitize_class():
    assert sanitize_class("my-feed_1 two") == "my-feed_1two"
