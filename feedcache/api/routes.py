from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from feedcache.api.services import FeedServices, get_services
from feedcache.api.settings import ApiSettings, get_api_settings
from feedcache.core.errors import PersistenceError, ScanInProgressError
from feedcache.core.state import load_last_scan
from feedcache.render.widget import FeedWidget, render_widget
from feedcache.utils.logger import get_logger

log = get_logger(__name__)

router = APIRouter()
admin_router = APIRouter(prefix="/admin", tags=["admin"])


class FeedItemModel(BaseModel):
    title: str = ""
    link: str = ""
    description: str = ""
    date: str = ""


class FeedItemsResponse(BaseModel):
    items: List[FeedItemModel]
    error: Optional[str] = None


class ScanReportResponse(BaseModel):
    run_id: str
    started_at: str
    finished_at: Optional[str] = None
    status: str
    scanned: int
    refreshed: int
    failed: int
    skipped: int
    errors: List[Dict[str, str]]


def is_privileged(
    x_admin_token: Optional[str] = Header(default=None),
    settings: ApiSettings = Depends(get_api_settings),
) -> bool:
    return settings.is_privileged(x_admin_token)


def require_admin(
    x_admin_token: Optional[str] = Header(default=None),
    settings: ApiSettings = Depends(get_api_settings),
) -> None:
    if not settings.admin_key_configured:
        raise HTTPException(status_code=403, detail="Admin access disabled")
    if not settings.is_privileged(x_admin_token):
        raise HTTPException(status_code=401, detail="Invalid admin token")


def _persistence_failure(exc: PersistenceError) -> HTTPException:
    log.error("Storage failure: {}", exc.message)
    return HTTPException(status_code=503, detail=exc.as_dict())


@router.get("/feeds/items", response_model=FeedItemsResponse)
def feed_items(
    url: str = Query(..., description="Feed URL"),
    items: int = Query(5, description="Maximum items to return"),
    cache_minutes: int = Query(60, description="Requested cache lifetime"),
    preview: bool = Query(False, description="Warm an empty cache (admin only)"),
    services: FeedServices = Depends(get_services),
    privileged: bool = Depends(is_privileged),
) -> Dict[str, Any]:
    feed_url = url.strip()
    if not feed_url:
        raise HTTPException(status_code=400, detail="Feed URL is required")

    try:
        # Only admin callers may add feeds to the background scan.
        if privileged:
            services.registry.register(feed_url, cache_minutes)
        cached = services.engine.get_cached(
            feed_url,
            items,
            cache_minutes,
            warm_if_empty=preview,
            privileged=privileged,
        )
    except PersistenceError as exc:
        raise _persistence_failure(exc) from exc
    return cached.to_dict()


@router.get("/feeds/render", response_class=HTMLResponse)
def feed_render(
    url: str = Query("", description="Feed URL"),
    items: int = Query(5),
    cache_minutes: int = Query(60),
    preview: bool = Query(False),
    item_wrapper_template: Optional[str] = Query(None),
    title_template: Optional[str] = Query(None),
    description_template: Optional[str] = Query(None),
    strip_html: bool = Query(True),
    trim_mode: str = Query("words"),
    trim_amount: int = Query(40),
    new_tab: bool = Query(True),
    nofollow: bool = Query(False),
    container_tag: str = Query("div"),
    container_class: Optional[str] = Query(None),
    services: FeedServices = Depends(get_services),
    privileged: bool = Depends(is_privileged),
) -> HTMLResponse:
    widget = FeedWidget.from_dict(
        {
            "feed_url": url,
            "items": items,
            "cache_minutes": cache_minutes,
            "item_wrapper_template": item_wrapper_template,
            "title_template": title_template,
            "description_template": description_template,
            "strip_html": strip_html,
            "trim_mode": trim_mode,
            "trim_amount": trim_amount,
            "links_new_tab": new_tab,
            "links_nofollow": nofollow,
            "container_tag": container_tag,
            "container_class": container_class,
        }
    )
    try:
        html = render_widget(
            widget,
            services.engine,
            services.renderer,
            editing=preview,
            privileged=privileged,
            register=privileged,
        )
    except PersistenceError as exc:
        raise _persistence_failure(exc) from exc
    return HTMLResponse(content=html)


@admin_router.get("/registry")
def admin_registry(
    _: None = Depends(require_admin),
    services: FeedServices = Depends(get_services),
) -> Dict[str, Any]:
    records = [record.to_dict() for record in services.registry.scan_all()]
    return {"count": len(records), "feeds": records}


@admin_router.post("/scan", response_model=ScanReportResponse)
def admin_scan(
    _: None = Depends(require_admin),
    services: FeedServices = Depends(get_services),
) -> Dict[str, Any]:
    try:
        report = services.engine.scan_and_refresh_all()
    except ScanInProgressError as exc:
        raise HTTPException(status_code=409, detail=exc.message) from exc
    return report.to_dict()


@admin_router.get("/last-scan")
def admin_last_scan(
    _: None = Depends(require_admin),
    services: FeedServices = Depends(get_services),
) -> Dict[str, Any]:
    if services.engine.state_path is None:
        raise HTTPException(status_code=404, detail="Scan state is not recorded")
    payload = load_last_scan(services.engine.state_path)
    if payload is None:
        raise HTTPException(status_code=404, detail="No scan has run yet")
    return payload


__all__ = ["router", "admin_router", "is_privileged", "require_admin"]
