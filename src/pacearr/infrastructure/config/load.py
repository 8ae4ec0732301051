"""Layered configuration loading.

Precedence, lowest first: built-in defaults, YAML file, environment
(including a ``.env`` file), CLI overrides. Every layer is normalized into
the sectioned YAML shape before merging, then validated once as AppConfig.
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

SECTIONS = frozenset({"data", "http", "logging", "stremio", "torbox", "subtitles"})

# Flat key (env var / CLI flag name) -> (section, key)
FLAT_KEYS: dict[str, tuple[str, str]] = {
    "data_dir": ("data", "dir"),
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "series_id": ("stremio", "series_id"),
    "torbox_api_key": ("torbox", "api_key"),
    "subtitle_languages": ("subtitles", "languages"),
    "opensubtitles_api_key": ("subtitles", "opensubtitles_api_key"),
}


def _merge_into(base: dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Deep-merge *layer* into *base*; non-mapping values replace."""
    for key, value in layer.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            base[key] = value


def _split_languages(value: Any) -> Any:
    # "en, es" from an env var -> ["en", "es"]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Bring a flat or sectioned layer into the sectioned shape."""
    out: dict[str, Any] = {
        key: dict(value)
        for key, value in layer.items()
        if key in SECTIONS and isinstance(value, Mapping)
    }
    for key in ("app_name", "environment"):
        if key in layer:
            out[key] = layer[key]

    for flat_key, (section, key) in FLAT_KEYS.items():
        if flat_key not in layer:
            continue
        value = layer[flat_key]
        if flat_key == "subtitle_languages":
            value = _split_languages(value)
        out.setdefault(section, {})[key] = value
    return out


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Build the validated AppConfig from all layers.

    Reads only the files it is given; never creates files or directories.
    Raises FileNotFoundError for a named file that does not exist and
    pydantic.ValidationError for invalid merged values.
    """
    # .env values join the environment layer; real env vars win over them.
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = [deepcopy(DEFAULT_CONFIG)]
    if config_path is not None:
        layers.append(_read_yaml(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged: dict[str, Any] = {}
    for layer in layers:
        _merge_into(merged, _sectioned(layer))

    return AppConfig.model_validate(merged)
