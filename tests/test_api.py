import pytest
from fastapi.testclient import TestClient

from feedcache.api.app import app
from feedcache.api.services import FeedServices, get_services
from feedcache.api.settings import get_api_settings
from feedcache.scheduler.scheduler import SCAN_JOB_ID

from conftest import cached, make_items

FEED = "https://example.com/feed"
ADMIN = {"X-Admin-Token": "secret"}


@pytest.fixture
def services(engine, renderer):
    return FeedServices(engine=engine, renderer=renderer)


@pytest.fixture
def client(services, monkeypatch):
    monkeypatch.setenv("ADMIN_API_KEY", "secret")
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")
    get_api_settings.cache_clear()
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()
    get_api_settings.cache_clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["admin_configured"] is True


def test_items_reads_cache_without_registering_anonymous_urls(client, services, fetcher):
    response = client.get("/feeds/items", params={"url": FEED, "items": 3, "cache_minutes": 20})

    assert response.status_code == 200
    assert response.json() == {"items": [], "error": None}
    assert len(services.registry) == 0
    assert fetcher.calls == []


def test_items_registers_for_admin(client, services, fetcher):
    response = client.get("/feeds/items", params={"url": FEED, "cache_minutes": 20}, headers=ADMIN)

    assert response.status_code == 200
    assert services.registry.get(FEED).cache_minutes == 20
    assert fetcher.calls == []


def test_items_returns_cached_items(client, services):
    services.store.write(FEED, cached(make_items(4)))

    body = client.get("/feeds/items", params={"url": FEED, "items": 2}).json()

    assert [item["title"] for item in body["items"]] == ["Item 1", "Item 2"]
    assert set(body["items"][0]) == {"title", "link", "description", "date"}


def test_items_requires_url(client):
    assert client.get("/feeds/items", params={"url": "  "}).status_code == 400


def test_preview_warms_only_for_admin(client, fetcher):
    anonymous = client.get("/feeds/items", params={"url": FEED, "preview": "true"})
    assert anonymous.json()["items"] == []
    assert fetcher.calls == []

    admin = client.get("/feeds/items", params={"url": FEED, "preview": "true", "items": 2}, headers=ADMIN)
    assert len(admin.json()["items"]) == 2
    assert fetcher.calls == [(FEED, 2, 4)]


def test_render_returns_widget_html(client, services):
    services.store.write(FEED, cached(make_items(2)))

    response = client.get(
        "/feeds/render",
        params={"url": FEED, "container_tag": "section", "container_class": "news", "title_template": "<b>{title}</b>"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.text.startswith('<section class="news">')
    assert "<b>Item 2</b>" in response.text


def test_render_registers_only_for_admin(client, services):
    client.get("/feeds/render", params={"url": FEED})
    assert len(services.registry) == 0

    client.get("/feeds/render", params={"url": FEED, "cache_minutes": 15}, headers=ADMIN)
    assert services.registry.get(FEED).cache_minutes == 15


def test_render_blank_url(client):
    assert client.get("/feeds/render").text == ""
    assert "Set a Feed URL" in client.get("/feeds/render", headers=ADMIN).text


def test_admin_requires_token(client):
    assert client.get("/admin/registry").status_code == 401
    assert client.get("/admin/registry", headers={"X-Admin-Token": "wrong"}).status_code == 401
    assert client.post("/admin/scan").status_code == 401


def test_admin_disabled_without_key(client, monkeypatch):
    monkeypatch.delenv("ADMIN_API_KEY")
    get_api_settings.cache_clear()

    assert client.get("/admin/registry", headers=ADMIN).status_code == 403


def test_admin_registry_lists_feeds(client, services):
    services.registry.register(FEED, 30)

    body = client.get("/admin/registry", headers=ADMIN).json()

    assert body["count"] == 1
    assert body["feeds"][0]["feed_url"] == FEED


def test_admin_scan_and_last_scan(client, services, fetcher):
    assert client.get("/admin/last-scan", headers=ADMIN).status_code == 404
    services.registry.register(FEED, 30)

    report = client.post("/admin/scan", headers=ADMIN).json()
    assert report["status"] == "success"
    assert report["refreshed"] == 1
    assert fetcher.urls == [FEED]

    last = client.get("/admin/last-scan", headers=ADMIN).json()
    assert last["run_id"] == report["run_id"]


def test_admin_scan_conflicts_with_running_scan(client, services, fetcher):
    services.registry.register(FEED, 30)

    with services.engine._scan_lock:
        response = client.post("/admin/scan", headers=ADMIN)

    assert response.status_code == 409
    assert fetcher.calls == []


def test_lifespan_installs_scan_job(services, monkeypatch):
    monkeypatch.setenv("SCHEDULER_ENABLED", "true")
    monkeypatch.setenv("SCAN_INTERVAL_SECONDS", "3600")
    get_api_settings.cache_clear()
    app.dependency_overrides[get_services] = lambda: services
    try:
        with TestClient(app) as client:
            scheduler = client.app.state.scheduler
            job = scheduler.get_job(SCAN_JOB_ID)
            assert job is not None
            assert job.trigger.interval.total_seconds() == 3600
        assert scheduler.get_job(SCAN_JOB_ID) is None
    finally:
        app.dependency_overrides.clear()
        get_api_settings.cache_clear()
