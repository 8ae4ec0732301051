"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "pacearr",
    "environment": "dev",
    "data": {
        "dir": "./data",
    },
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "user_agent": "pacearr/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "stremio": {
        "series_id": "pp_onepace",
        "catalog_id": "seriesCatalog",
    },
    "torbox": {
        "base_url": "https://api.torbox.app/v1/api",
    },
    "subtitles": {
        "languages": ["en"],
        "max_results": 20,
        "community_max_results": 10,
        "community_rating_discount": 0.5,
        "timeout_seconds": 15.0,
    },
}
