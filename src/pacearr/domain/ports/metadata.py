"""Port for the read-only metadata / catalog store."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pacearr.domain.entities.stremio import RawStreamDescriptor


@runtime_checkable
class MetadataStorePort(Protocol):
    """Async read-only access to series metadata and per-episode stream files."""

    async def get_series_meta(self, series_id: str) -> dict[str, Any] | None:
        """Return the ``meta`` object of a series, or None if unknown."""
        ...

    async def list_episodes(self, series_id: str) -> list[dict[str, Any]]:
        """Return the indexed ``videos`` records (id, season, episode, title)."""
        ...

    async def get_catalog(self, catalog_id: str) -> list[dict[str, Any]]:
        """Return the catalog entries (``metas``) for a catalog id."""
        ...

    async def get_stream_descriptors(self, episode_id: str) -> list[RawStreamDescriptor]:
        """Return the raw per-file stream descriptors for an episode key."""
        ...
