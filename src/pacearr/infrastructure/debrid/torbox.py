"""Torbox debrid client.

All endpoints live below ``https://api.torbox.app/v1/api`` and take the
account key as a Bearer token:

    GET  torrents/checkcached?hash=<h>&format=object  -> {"data": {<h>: {...}} | null}
    GET  torrents/mylist?bypass_cache=true            -> {"data": [{"id", "hash", ...}]}
    GET  torrents/mylist?id=<id>&bypass_cache=true    -> {"data": {"files": [...]}}
    POST torrents/createtorrent (form: magnet, seed)  -> {"data": {"torrent_id": ...}}
    GET  user/me                                      -> {"data": {...}}

Direct links are permalinks to ``torrents/requestdl`` with ``redirect=true``,
so the client resolves them lazily when playback starts.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

import httpx
import structlog

from pacearr.domain.entities.exceptions import DebridAuthError, DebridServiceError
from pacearr.domain.entities.stremio import FileLink
from pacearr.infrastructure.stremio.stream_converter import magnet_uri

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.torbox.app/v1/api"

# seed=3: download only, never seed back to the swarm.
_SEED_DOWNLOAD_ONLY = "3"


class TorboxClient:
    """``DebridServicePort`` implementation for Torbox."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 15.0,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "torbox"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        api_key: str,
        params: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> Any:
        """Call the API and return the ``data`` member of the envelope."""
        try:
            resp = await self._http.request(
                method,
                f"{self._base_url}/{path}",
                params=params,
                data=data,
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            log.warning("torbox_request_failed", path=path, error=str(e))
            raise DebridServiceError(f"{path}: {e}") from e

        if resp.status_code in (401, 403):
            log.warning("torbox_auth_rejected", path=path, status=resp.status_code)
            raise DebridAuthError(f"{path}: HTTP {resp.status_code}")

        if resp.status_code >= 400:
            log.warning("torbox_http_error", path=path, status=resp.status_code)
            raise DebridServiceError(f"{path}: HTTP {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as e:
            log.warning("torbox_invalid_json", path=path)
            raise DebridServiceError(f"{path}: invalid JSON") from e

        if not isinstance(payload, dict):
            raise DebridServiceError(f"{path}: unexpected payload")

        if payload.get("success") is False:
            log.warning(
                "torbox_api_error",
                path=path,
                error=payload.get("error"),
                detail=payload.get("detail"),
            )
            raise DebridServiceError(f"{path}: {payload.get('error') or 'api error'}")

        return payload.get("data")

    async def check_availability(self, info_hash: str, *, api_key: str) -> bool:
        data = await self._request(
            "GET",
            "torrents/checkcached",
            api_key=api_key,
            params={"hash": info_hash, "format": "object"},
        )
        if not isinstance(data, dict):
            return False
        wanted = info_hash.lower()
        return any(str(h).lower() == wanted for h in data)

    async def find_job(self, info_hash: str, *, api_key: str) -> str | None:
        data = await self._request(
            "GET",
            "torrents/mylist",
            api_key=api_key,
            params={"bypass_cache": "true"},
        )
        if not isinstance(data, list):
            return None
        wanted = info_hash.lower()
        for torrent in data:
            if not isinstance(torrent, dict):
                continue
            if str(torrent.get("hash", "")).lower() == wanted and torrent.get("id") is not None:
                return str(torrent["id"])
        return None

    async def create_job(self, info_hash: str, *, api_key: str) -> str | None:
        data = await self._request(
            "POST",
            "torrents/createtorrent",
            api_key=api_key,
            data={"magnet": magnet_uri(info_hash), "seed": _SEED_DOWNLOAD_ONLY},
        )
        if not isinstance(data, dict):
            return None
        torrent_id = data.get("torrent_id")
        return str(torrent_id) if torrent_id is not None else None

    def _permalink(self, *, api_key: str, job_id: str, file_id: Any) -> str:
        query = urlencode(
            {
                "token": api_key,
                "torrent_id": job_id,
                "file_id": file_id,
                "redirect": "true",
            }
        )
        return f"{self._base_url}/torrents/requestdl?{query}"

    async def list_links(self, job_id: str, *, api_key: str) -> list[FileLink]:
        data = await self._request(
            "GET",
            "torrents/mylist",
            api_key=api_key,
            params={"id": job_id, "bypass_cache": "true"},
        )
        if not isinstance(data, dict):
            return []
        files = data.get("files")
        if not isinstance(files, list):
            return []

        links: list[FileLink] = []
        for idx, f in enumerate(files):
            if not isinstance(f, dict):
                continue
            file_id = f.get("id", idx)
            name = f.get("short_name") or f.get("name") or f"file_{file_id}"
            try:
                size = int(f.get("size") or 0)
            except (TypeError, ValueError):
                size = 0
            links.append(
                FileLink(
                    url=self._permalink(api_key=api_key, job_id=job_id, file_id=file_id),
                    name=str(name),
                    size=size,
                )
            )
        return links

    async def get_user_info(self, *, api_key: str) -> dict[str, Any] | None:
        try:
            data = await self._request("GET", "user/me", api_key=api_key)
        except DebridAuthError:
            return None
        return data if isinstance(data, dict) else None
