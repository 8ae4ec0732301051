"""Stremio catalog and meta use case: passthrough over the metadata store."""

from __future__ import annotations

from typing import Any

import structlog

from pacearr.domain.ports.metadata import MetadataStorePort

log = structlog.get_logger(__name__)


class StremioCatalogUseCase:
    """Serves the single series catalog and its meta record.

    Unknown types or ids yield empty results; store errors are logged and
    treated the same way.
    """

    def __init__(
        self,
        *,
        metadata: MetadataStorePort,
        series_id: str,
        catalog_id: str,
    ) -> None:
        self._metadata = metadata
        self._series_id = series_id
        self._catalog_id = catalog_id

    async def catalog(self, content_type: str, catalog_id: str) -> list[dict[str, Any]]:
        if content_type != "series" or catalog_id != self._catalog_id:
            return []
        try:
            return await self._metadata.get_catalog(catalog_id)
        except Exception:
            log.warning("stremio_catalog_error", catalog_id=catalog_id, exc_info=True)
            return []

    async def meta(self, content_type: str, series_id: str) -> dict[str, Any]:
        if content_type != "series" or series_id != self._series_id:
            return {}
        try:
            meta = await self._metadata.get_series_meta(series_id)
        except Exception:
            log.warning("stremio_meta_error", series_id=series_id, exc_info=True)
            return {}
        return meta or {}
