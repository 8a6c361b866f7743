from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from feedcache.core.engine import RefreshEngine
from feedcache.render.template import TemplateRenderer


@dataclass(slots=True)
class FeedServices:
    engine: RefreshEngine
    renderer: TemplateRenderer

    @property
    def registry(self):
        return self.engine.registry

    @property
    def store(self):
        return self.engine.store


@lru_cache(maxsize=1)
def get_services() -> FeedServices:
    """Build the process-wide engine and renderer once."""

    return FeedServices(engine=RefreshEngine.from_config(), renderer=TemplateRenderer())


__all__ = ["FeedServices", "get_services"]
