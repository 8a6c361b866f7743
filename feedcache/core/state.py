"""Persistence helpers for scan run state."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from feedcache.core.config import Config
from feedcache.core.storage import read_json, write_json_atomic

DEFAULT_STATE_PATH = Path("data/system/last_scan.json")


def resolve_state_path(path: Path | str | None = None) -> Path:
    return Path(path or Config.get("storage", "state_file", default=DEFAULT_STATE_PATH))


def load_last_scan(path: Path | str | None = None) -> Optional[Dict[str, Any]]:
    """Return the most recent recorded scan run, if available."""

    payload = read_json(resolve_state_path(path))
    return payload if isinstance(payload, dict) else None


def write_last_scan(payload: Dict[str, Any], path: Path | str | None = None) -> Dict[str, Any]:
    """Atomically persist scan run metadata and return the stored payload."""

    stored = {
        **payload,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    write_json_atomic(resolve_state_path(path), stored)
    return stored


__all__ = ["load_last_scan", "write_last_scan", "DEFAULT_STATE_PATH"]
