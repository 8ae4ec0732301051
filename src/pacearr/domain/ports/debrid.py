"""Port for the cached-torrent (debrid) service."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pacearr.domain.entities.stremio import FileLink


@runtime_checkable
class DebridServicePort(Protocol):
    """Remote operations of a debrid service.

    Every call takes the per-request credential explicitly. Implementations
    raise ``DebridError`` subclasses on transport or payload failures.
    """

    @property
    def name(self) -> str:
        """Service name (e.g. 'torbox')."""
        ...

    async def check_availability(self, info_hash: str, *, api_key: str) -> bool:
        """Return True if the torrent is cached by the service."""
        ...

    async def find_job(self, info_hash: str, *, api_key: str) -> str | None:
        """Return the id of an existing job for *info_hash*, if any."""
        ...

    async def create_job(self, info_hash: str, *, api_key: str) -> str | None:
        """Submit a download-only job for *info_hash* and return its id."""
        ...

    async def list_links(self, job_id: str, *, api_key: str) -> list[FileLink]:
        """Return the downloadable file links of a job."""
        ...

    async def get_user_info(self, *, api_key: str) -> dict[str, Any] | None:
        """Return the account record for *api_key*, or None if rejected."""
        ...
