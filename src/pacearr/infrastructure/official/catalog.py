"""Static catalog of official One Pace releases.

The bundled ``official_streams.yaml`` is read and validated once at startup
and exposed through read-only maps; lookups never touch the filesystem.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from pacearr.domain.entities.exceptions import CatalogLoadError
from pacearr.domain.entities.official import (
    OfficialEntry,
    OfficialQuality,
    OfficialVariant,
)

log = structlog.get_logger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).with_name("official_streams.yaml")


class _VariantModel(BaseModel):
    type: str
    qualities: dict[str, str] = Field(default_factory=dict)

    @field_validator("qualities")
    @classmethod
    def _validate_urls(cls, v: dict[str, str]) -> dict[str, str]:
        for resolution, url in v.items():
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"{resolution}: url must be http(s)")
        return v


class _EntryModel(BaseModel):
    title: str
    arc_number: int
    variants: list[_VariantModel] = Field(default_factory=list)


def _to_entry(model: _EntryModel) -> OfficialEntry:
    return OfficialEntry(
        title=model.title,
        arc_number=model.arc_number,
        variants=tuple(
            OfficialVariant(
                type=v.type,
                qualities=tuple(
                    OfficialQuality(resolution=res, url=url)
                    for res, url in v.qualities.items()
                ),
            )
            for v in model.variants
        ),
    )


def load_official_entries(path: Path) -> dict[str, OfficialEntry]:
    """Read and validate an official-release YAML file."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        log.error(
            "official_catalog_load_failed",
            path=str(path),
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise CatalogLoadError(str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise CatalogLoadError("official catalog root must be a mapping")

    entries: dict[str, OfficialEntry] = {}
    for episode_id, raw in data.items():
        try:
            entries[str(episode_id)] = _to_entry(_EntryModel.model_validate(raw))
        except ValidationError as e:
            log.error(
                "official_catalog_invalid_entry",
                episode_id=episode_id,
                error_details=e.errors(),
            )
            raise CatalogLoadError(f"{episode_id}: {e}") from e
    return entries


class YamlOfficialCatalog:
    """Read-only official catalog backed by a YAML file."""

    def __init__(self, entries: Mapping[str, OfficialEntry]) -> None:
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def from_file(cls, path: Path = DEFAULT_CATALOG_PATH) -> YamlOfficialCatalog:
        catalog = cls(load_official_entries(path))
        log.info(
            "official_catalog_loaded",
            path=str(path),
            episodes=len(catalog._entries),
        )
        return catalog

    def get_entry(self, episode_id: str) -> OfficialEntry | None:
        return self._entries.get(episode_id)

    def available_episodes(self) -> list[str]:
        return [eid for eid, entry in self._entries.items() if entry.stream_count]

    def stream_count(self, episode_id: str) -> int:
        entry = self._entries.get(episode_id)
        return entry.stream_count if entry else 0
