"""Configuration loading.

Settings live in a JSON file (``config/config.json`` by default). The
database URL can be overridden with ``POKECATALOG_DATABASE_URL``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_CONFIG_PATH = "config/config.json"
DATABASE_URL_ENV = "POKECATALOG_DATABASE_URL"

DEFAULT_BASE_URL = "https://pokeapi.co/api/v2"
DEFAULT_DATABASE_URL = "sqlite:///data/catalog.db"
DEFAULT_MOVE_FETCH_BUDGET = 8


@dataclass(frozen=True)
class Settings:
    pokeapi_base_url: str = DEFAULT_BASE_URL
    database_url: str = DEFAULT_DATABASE_URL
    request_timeout_seconds: float = 10.0
    max_retries: int = 2
    retry_backoff_seconds: float = 1.0
    request_delay_seconds: float = 0.0
    move_fetch_budget: int = DEFAULT_MOVE_FETCH_BUDGET
    flavor_language: str = "en"
    log_level: str = "INFO"


def read_json(path: str) -> Optional[Dict[str, Any]]:
    """Read a JSON object from disk; return None if missing or invalid."""
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


def load_config(config_path: str) -> Dict[str, Any]:
    """Load JSON configuration from ``config_path``.

    Raises ``RuntimeError`` if the file is missing or invalid.
    """
    data = read_json(config_path)
    if data is None:
        raise RuntimeError(f"Missing or invalid config: {config_path}")
    return data


def settings_from_config(
    cfg: Dict[str, Any], environ: Optional[Dict[str, str]] = None
) -> Settings:
    """Build ``Settings`` from a loaded config dict, applying env overrides."""
    env = os.environ if environ is None else environ
    database_url = env.get(DATABASE_URL_ENV) or str(
        cfg.get("database_url", DEFAULT_DATABASE_URL)
    )
    budget = int(cfg.get("move_fetch_budget", DEFAULT_MOVE_FETCH_BUDGET))
    if budget < 0:
        raise RuntimeError(f"move_fetch_budget must be >= 0, got {budget}")

    return Settings(
        pokeapi_base_url=str(cfg.get("pokeapi_base_url", DEFAULT_BASE_URL)).rstrip("/"),
        database_url=database_url,
        request_timeout_seconds=float(cfg.get("request_timeout_seconds", 10.0)),
        max_retries=int(cfg.get("max_retries", 2)),
        retry_backoff_seconds=float(cfg.get("retry_backoff_seconds", 1.0)),
        request_delay_seconds=float(cfg.get("request_delay_seconds", 0.0)),
        move_fetch_budget=budget,
        flavor_language=str(cfg.get("flavor_language", "en")),
        log_level=str(cfg.get("log_level", "INFO")).upper(),
    )
