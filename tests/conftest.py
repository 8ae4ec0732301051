"""Shared test fixtures for pacearr test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from pacearr.domain.entities import (
    EpisodeDescriptor,
    OfficialEntry,
    OfficialQuality,
    OfficialVariant,
)
from pacearr.infrastructure.config.schema import SubtitleConfig
from pacearr.infrastructure.official.catalog import YamlOfficialCatalog

SERIES_ID = "pp_onepace"
CATALOG_ID = "seriesCatalog"

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def episode() -> EpisodeDescriptor:
    """Romance Dawn 1, resolved from a compound id."""
    return EpisodeDescriptor(id="RO_1", title="Romance Dawn", season=1, episode=1)


@pytest.fixture()
def official_entry() -> OfficialEntry:
    """Two variants: subtitled (480p/1080p) and dubbed (1080p)."""
    return OfficialEntry(
        title="Romance Dawn",
        arc_number=1,
        variants=(
            OfficialVariant(
                type="English Subtitles",
                qualities=(
                    OfficialQuality("480p", "https://pixeldrain.com/api/file/ro1-480-sub"),
                    OfficialQuality("1080p", "https://pixeldrain.com/api/file/ro1-1080-sub"),
                ),
            ),
            OfficialVariant(
                type="English Dub",
                qualities=(
                    OfficialQuality("1080p", "https://pixeldrain.com/api/file/ro1-1080-dub"),
                ),
            ),
        ),
    )


@pytest.fixture()
def official_catalog(official_entry: OfficialEntry) -> YamlOfficialCatalog:
    return YamlOfficialCatalog({"RO_1": official_entry})


@pytest.fixture()
def subtitle_config() -> SubtitleConfig:
    return SubtitleConfig(timeout_seconds=1.0)


# ---------------------------------------------------------------------------
# Metadata store fixtures
# ---------------------------------------------------------------------------


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    """Metadata directory with one series, its catalog, and RO_1 streams."""
    root = tmp_path / "data"
    _write_json(
        root / "meta" / "series" / f"{SERIES_ID}.json",
        {
            "meta": {
                "id": SERIES_ID,
                "type": "series",
                "name": "One Pace",
                "videos": [
                    {"id": "RO_1", "season": 1, "episode": 1, "title": "Romance Dawn"},
                    {"id": "RO_2", "season": 1, "episode": 2, "name": "Romance Dawn 2"},
                    {"id": "OR_1", "season": "2", "episode": "1"},
                ],
            }
        },
    )
    _write_json(
        root / "catalog" / "series" / f"{CATALOG_ID}.json",
        {"metas": [{"id": SERIES_ID, "type": "series", "name": "One Pace"}]},
    )
    _write_json(
        root / "stream" / "series" / "RO_1.json",
        {
            "streams": [
                {
                    "infoHash": "abc123",
                    "fileIdx": 0,
                    "name": "One Pace",
                    "title": "[One Pace] Romance Dawn 01 [1080p]",
                    "behaviorHints": {"filename": "Romance Dawn 01.mkv"},
                },
            ]
        },
    )
    return root
