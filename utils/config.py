"""Application configuration loaded from YAML with environment overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .settings_storage import DuckDBStorage, KeyValueStorage, MemoryStorage, SessionStateStorage

DEFAULT_CONFIG_PATH = "config.yaml"
ENV_PREFIX = "INVENTORY_APP_"
STORAGE_BACKENDS = {"duckdb", "session", "memory"}


@dataclass
class AppConfig:
    """Runtime configuration for the dashboard."""

    storage_backend: str = "duckdb"
    storage_path: str = "data/app_state.duckdb"
    export_dir: str = "exports"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.storage_backend = str(self.storage_backend).lower()
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(f"Unknown storage backend: {self.storage_backend}")
        self.log_level = str(self.log_level).upper()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AppConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    @classmethod
    def load(cls, path: str = DEFAULT_CONFIG_PATH, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Read ``path`` (if present) and apply ``INVENTORY_APP_*`` overrides."""

        data: Dict[str, Any] = {}
        file_path = Path(path)
        if file_path.exists():
            with open(file_path, "r", encoding="utf-8") as fp:
                loaded = yaml.safe_load(fp) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"{path} must contain a mapping")
            data.update(loaded)

        environ = os.environ if environ is None else environ
        for f in fields(cls):
            value = environ.get(ENV_PREFIX + f.name.upper())
            if value:
                data[f.name] = value
        return cls.from_mapping(data)


def build_storage(config: AppConfig) -> KeyValueStorage:
    """Create the key/value backend selected in ``config``."""

    if config.storage_backend == "memory":
        return MemoryStorage()
    if config.storage_backend == "session":
        return SessionStateStorage()
    return DuckDBStorage(config.storage_path)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
