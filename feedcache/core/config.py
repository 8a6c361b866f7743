import os
from pathlib import Path

import yaml

from feedcache.core.errors import ConfigError

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.yaml"


class Config:
    _config = None

    @classmethod
    def load(cls, path=None):
        if cls._config is None:
            path = Path(path or os.getenv("FEEDCACHE_CONFIG") or DEFAULT_CONFIG_PATH)
            if not path.exists():
                cls._config = {}
                return cls._config
            try:
                with open(path, "r", encoding="utf-8") as f:
                    cls._config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Invalid YAML in {path}: {exc}", key=str(path)) from exc
        return cls._config

    @classmethod
    def reset(cls):
        cls._config = None

    @classmethod
    def get(cls, *keys, default=None):
        cfg = cls.load()
        for key in keys:
            if not isinstance(cfg, dict):
                return default
            cfg = cfg.get(key)
        return cfg if cfg is not None else default
