"""Port for the static official-release catalog."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pacearr.domain.entities.official import OfficialEntry


@runtime_checkable
class OfficialCatalogPort(Protocol):
    """Lookup of pre-catalogued first-party stream links."""

    def get_entry(self, episode_id: str) -> OfficialEntry | None:
        """Return the official entry for an episode key, or None."""
        ...

    def available_episodes(self) -> list[str]:
        """Return every episode key with at least one official entry."""
        ...

    def stream_count(self, episode_id: str) -> int:
        """Return the number of official links for an episode key."""
        ...
