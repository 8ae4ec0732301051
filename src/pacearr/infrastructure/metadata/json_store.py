"""JSON-file metadata store.

Layout below ``root``::

    meta/series/<series_id>.json        {"meta": {..., "videos": [...]}}
    catalog/series/<catalog_id>.json    {"metas": [...]}
    stream/series/<episode_id>.json     {"streams": [{"infoHash": ..., "fileIdx": ...}]}

Files are read on every call (sync disk I/O -> ``asyncio.to_thread``);
missing or malformed files yield empty results.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any

import structlog

from pacearr.domain.entities.stremio import RawStreamDescriptor

log = structlog.get_logger(__name__)

# Ids become file names; refuse anything that could escape the data dir.
_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


class JsonMetadataStore:
    """Read-only ``MetadataStorePort`` over a directory of JSON files."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, kind: str, item_id: str) -> Path | None:
        if not _SAFE_ID_RE.match(item_id):
            log.warning("metadata_unsafe_id", kind=kind, item_id=item_id)
            return None
        return self.root / kind / "series" / f"{item_id}.json"

    def _read_json(self, path: Path) -> Any:
        raw = path.read_text(encoding="utf-8")
        return json.loads(raw)

    async def _load(self, kind: str, item_id: str) -> dict[str, Any] | None:
        path = self._path(kind, item_id)
        if path is None:
            return None
        try:
            data = await asyncio.to_thread(self._read_json, path)
        except FileNotFoundError:
            log.debug("metadata_file_missing", path=str(path))
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            log.warning(
                "metadata_file_unreadable",
                path=str(path),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None
        if not isinstance(data, dict):
            log.warning("metadata_file_not_object", path=str(path))
            return None
        return data

    async def get_series_meta(self, series_id: str) -> dict[str, Any] | None:
        data = await self._load("meta", series_id)
        if data is None:
            return None
        meta = data.get("meta")
        return meta if isinstance(meta, dict) else None

    async def list_episodes(self, series_id: str) -> list[dict[str, Any]]:
        meta = await self.get_series_meta(series_id)
        if meta is None:
            return []
        videos = meta.get("videos")
        if not isinstance(videos, list):
            return []
        return [v for v in videos if isinstance(v, dict)]

    async def get_catalog(self, catalog_id: str) -> list[dict[str, Any]]:
        data = await self._load("catalog", catalog_id)
        if data is None:
            return []
        metas = data.get("metas")
        if not isinstance(metas, list):
            return []
        return [m for m in metas if isinstance(m, dict)]

    async def get_stream_descriptors(self, episode_id: str) -> list[RawStreamDescriptor]:
        data = await self._load("stream", episode_id)
        if data is None:
            return []
        streams = data.get("streams")
        if not isinstance(streams, list):
            return []
        return [RawStreamDescriptor.from_record(s) for s in streams if isinstance(s, dict)]
