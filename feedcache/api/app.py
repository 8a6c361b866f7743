from contextlib import asynccontextmanager

from fastapi import FastAPI

from feedcache import __version__
from feedcache.api.routes import admin_router, router
from feedcache.api.services import get_services
from feedcache.api.settings import get_api_settings
from feedcache.scheduler.scheduler import create_background_scheduler, uninstall_scan_job
from feedcache.utils.logger import get_logger

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_api_settings()
    scheduler = None
    if settings.scheduler_enabled:
        services = app.dependency_overrides.get(get_services, get_services)()
        scheduler = create_background_scheduler(services.engine, settings.scan_interval_seconds)
        scheduler.start()
        log.info("Background feed scan enabled every {}s", settings.scan_interval_seconds)
    app.state.scheduler = scheduler
    try:
        yield
    finally:
        if scheduler is not None:
            uninstall_scan_job(scheduler)
            scheduler.shutdown(wait=False)
            log.info("Background feed scan stopped")


app = FastAPI(
    title="Feed Cache API",
    description="Cached RSS/Atom items and sanitized widget HTML",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(router, tags=["Feeds"])
app.include_router(admin_router)


@app.get("/health")
def health():
    settings = get_api_settings()
    return {
        "status": "ok",
        "scheduler_enabled": settings.scheduler_enabled,
        "admin_configured": settings.admin_key_configured,
    }
