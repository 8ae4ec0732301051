"""Official One Pace subtitles from the public GitHub repository.

Folder listing goes through the GitHub contents API; when none of the
folder guesses yields a subtitle file, well-known raw file names are
probed directly with HEAD requests.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from pacearr.domain.entities.stremio import (
    EpisodeDescriptor,
    SubtitleCandidate,
    SubtitleSource,
)
from pacearr.infrastructure.stremio.arcs import arc_name
from pacearr.infrastructure.stremio.languages import (
    DEFAULT_LANGUAGE,
    language_from_filename,
    language_label,
    wants_language,
)

log = structlog.get_logger(__name__)

CONTENTS_API_URL = (
    "https://api.github.com/repos/one-pace/one-pace-public-subtitles"
    "/contents/main/Release/Final%20Subs"
)
RAW_BASE_URL = (
    "https://raw.githubusercontent.com/one-pace/one-pace-public-subtitles"
    "/main/main/Release/Final%20Subs"
)

SUBTITLE_EXTENSIONS = (".srt", ".vtt", ".ass")
PROBE_LANGUAGES = ("en", "es", "fr", "pt", "de", "it", "ja")

OFFICIAL_RATING = 10.0


def folder_guesses(episode_id: str) -> list[str]:
    """Folder names tried for an episode key, in order, without duplicates."""
    guesses = [episode_id, episode_id.replace("_", " ", 1), arc_name(episode_id)]
    return list(dict.fromkeys(guesses))


def probe_filenames(episode_id: str) -> list[str]:
    """Raw file names probed when no folder listing matched."""
    names: list[str] = []
    for lang in PROBE_LANGUAGES:
        for ext in SUBTITLE_EXTENSIONS:
            names.extend(
                [
                    f"{episode_id}.{lang}{ext}",
                    f"{episode_id}_{lang}{ext}",
                    f"{episode_id} - {lang}{ext}",
                    f"{episode_id}{ext}",
                ]
            )
    return list(dict.fromkeys(names))


def _mentions_episode(name: str, episode_id: str) -> bool:
    # Whole key only: RO_1 must not match RO_10.
    pattern = rf"(?<![A-Za-z0-9]){re.escape(episode_id)}(?!\d)"
    return re.search(pattern, name) is not None


def _is_episode_subtitle(entry: dict[str, Any], episode_id: str) -> bool:
    if entry.get("type") != "file":
        return False
    name = str(entry.get("name", ""))
    if not name.lower().endswith(SUBTITLE_EXTENSIONS):
        return False
    return _mentions_episode(name, episode_id) or "subtitle" in name.lower()


class OnePaceSubtitleRepository:
    """``SubtitleSourcePort`` over the official One Pace subtitle repository."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        contents_api_url: str = CONTENTS_API_URL,
        raw_base_url: str = RAW_BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._contents_api_url = contents_api_url.rstrip("/")
        self._raw_base_url = raw_base_url.rstrip("/")
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "onepace"

    async def _list_folder(self, folder: str, episode_id: str) -> list[dict[str, str]]:
        url = f"{self._contents_api_url}/{quote(folder, safe='')}"
        try:
            resp = await self._http.get(
                url,
                headers={"Accept": "application/vnd.github.v3+json"},
                timeout=self._timeout,
            )
        except httpx.HTTPError:
            log.warning("onepace_subtitles_listing_failed", folder=folder)
            return []

        if resp.status_code != 200:
            log.debug("onepace_subtitles_folder_missing", folder=folder, status=resp.status_code)
            return []

        try:
            data = resp.json()
        except ValueError:
            log.warning("onepace_subtitles_invalid_json", folder=folder)
            return []

        if not isinstance(data, list):
            return []

        return [
            {"name": str(entry["name"]), "url": str(entry.get("download_url") or "")}
            for entry in data
            if isinstance(entry, dict) and _is_episode_subtitle(entry, episode_id)
        ]

    async def _probe(self, filename: str) -> dict[str, str] | None:
        url = f"{self._raw_base_url}/{quote(filename, safe='')}"
        try:
            resp = await self._http.head(url, timeout=self._timeout)
        except httpx.HTTPError:
            return None
        if resp.status_code != 200:
            return None
        return {"name": filename, "url": url}

    async def list_files(self, episode_id: str) -> list[dict[str, str]]:
        """Return ``{name, url}`` records of the subtitle files for an episode key."""
        files: list[dict[str, str]] = []
        for folder in folder_guesses(episode_id):
            files.extend(await self._list_folder(folder, episode_id))

        if files:
            return [f for f in files if f["url"]]

        log.debug("onepace_subtitles_probing", episode_id=episode_id)
        probed = await asyncio.gather(*(self._probe(n) for n in probe_filenames(episode_id)))
        return [p for p in probed if p is not None]

    async def search(
        self,
        episode: EpisodeDescriptor,
        languages: Sequence[str],
    ) -> list[SubtitleCandidate]:
        files = await self.list_files(episode.id)

        results: list[SubtitleCandidate] = []
        for f in files:
            lang = language_from_filename(f["name"]) or DEFAULT_LANGUAGE
            if not wants_language(languages, lang):
                continue
            results.append(
                SubtitleCandidate(
                    url=f["url"],
                    lang=lang,
                    label=f"One Pace Official - {language_label(lang)} ({episode.title})",
                    source=SubtitleSource.OFFICIAL,
                    rating=OFFICIAL_RATING,
                    filename=f["name"],
                )
            )

        log.info(
            "onepace_subtitles_found",
            episode_id=episode.id,
            files=len(files),
            matched=len(results),
        )
        return results
