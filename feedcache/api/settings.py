"""Runtime settings for the feed cache API layer."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from feedcache.scheduler.scheduler import resolve_interval


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class ApiSettings:
    """Container for runtime-tunable API settings."""

    def __init__(self) -> None:
        self.admin_api_key: str | None = os.getenv("ADMIN_API_KEY") or None
        self.scheduler_enabled: bool = _env_flag("SCHEDULER_ENABLED")
        raw_interval = os.getenv("SCAN_INTERVAL_SECONDS")
        self.scan_interval_seconds: int = resolve_interval(raw_interval if raw_interval else None)

    @property
    def admin_key_configured(self) -> bool:
        return bool(self.admin_api_key)

    def is_privileged(self, token: Optional[str]) -> bool:
        # Without a configured key nobody is privileged.
        if not self.admin_key_configured or not token:
            return False
        return token == self.admin_api_key


@lru_cache(maxsize=1)
def get_api_settings() -> ApiSettings:
    """Return cached API settings instance."""

    return ApiSettings()


__all__ = ["ApiSettings", "get_api_settings"]
