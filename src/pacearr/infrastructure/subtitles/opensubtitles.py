"""Community subtitles from OpenSubtitles.

Without an API key the legacy REST search is used
(``rest.opensubtitles.org/search/sublanguageid-<ids>/query-<q>[/season-N/episode-M]``,
ISO 639-2 language ids). With a key the v3 REST API is queried
(``api.opensubtitles.com/api/v1/subtitles``, ``Api-Key`` header).

Several query phrasings are tried concurrently; results are merged,
deduplicated on (language, url) and capped.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from pacearr.domain.entities.stremio import (
    EpisodeDescriptor,
    SubtitleCandidate,
    SubtitleSource,
)
from pacearr.infrastructure.stremio.languages import (
    ALL_LANGUAGES,
    language_label,
    to_iso639_1,
    to_iso639_2,
    wants_language,
)

log = structlog.get_logger(__name__)

LEGACY_SEARCH_URL = "https://rest.opensubtitles.org/search"
V3_SEARCH_URL = "https://api.opensubtitles.com/api/v1/subtitles"


@dataclass(frozen=True)
class SearchStrategy:
    """One query phrasing; season/episode narrow the search when set."""

    query: str
    season: int | None = None
    episode: int | None = None


def search_strategies(episode: EpisodeDescriptor) -> list[SearchStrategy]:
    strategies = [SearchStrategy(query=f"One Pace {episode.title}")]
    if episode.season is not None and episode.episode is not None:
        strategies.append(
            SearchStrategy(
                query=f"One Piece {episode.title}",
                season=episode.season,
                episode=episode.episode,
            )
        )
    strategies.append(SearchStrategy(query="One Pace"))
    return strategies


def _match_score(filename: str, episode: EpisodeDescriptor, rating: float) -> float:
    """Relevance of a result to the episode (used to order equal ratings)."""
    name = filename.lower()
    score = 0.0
    if episode.title.lower() in name:
        score += 50
    if "one pace" in name:
        score += 30
    elif "one piece" in name:
        score += 20
    if episode.season is not None and f"s{episode.season}" in name:
        score += 15
    if episode.episode is not None and f"e{episode.episode}" in name:
        score += 15
    return score + max(rating, 0.0) * 2


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class OpenSubtitlesSource:
    """``SubtitleSourcePort`` over OpenSubtitles (legacy REST or v3)."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        api_key: str | None = None,
        user_agent: str = "pacearr v0.1",
        max_results: int = 10,
        timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._user_agent = user_agent
        self._max_results = max_results
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "opensubtitles"

    # --- legacy REST ---

    def _legacy_url(self, strategy: SearchStrategy, languages: Sequence[str]) -> str:
        lang_ids = ",".join(to_iso639_2(lang) for lang in languages)
        path = f"sublanguageid-{lang_ids}/query-{quote(strategy.query, safe='')}"
        if strategy.season is not None and strategy.episode is not None:
            path += f"/season-{strategy.season}/episode-{strategy.episode}"
        return f"{LEGACY_SEARCH_URL}/{path}"

    def _parse_legacy(self, data: Any) -> list[SubtitleCandidate]:
        if not isinstance(data, list):
            return []
        results: list[SubtitleCandidate] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            url = item.get("SubDownloadLink")
            if not url:
                continue
            raw_lang = item.get("ISO639") or item.get("SubLanguageID") or "en"
            lang = to_iso639_1(str(raw_lang))
            filename = str(item.get("SubFileName") or "OpenSubtitles")
            results.append(
                SubtitleCandidate(
                    url=str(url),
                    lang=lang,
                    label=f"{language_label(lang)} - {filename}",
                    source=SubtitleSource.COMMUNITY,
                    rating=_as_float(item.get("SubRating")),
                    filename=filename,
                )
            )
        return results

    # --- v3 REST ---

    def _v3_params(self, strategy: SearchStrategy, languages: Sequence[str]) -> dict[str, Any]:
        params: dict[str, Any] = {"query": strategy.query, "type": "episode"}
        if ALL_LANGUAGES not in languages:
            params["languages"] = ",".join(languages)
        if strategy.season is not None and strategy.episode is not None:
            params["season_number"] = strategy.season
            params["episode_number"] = strategy.episode
        return params

    def _parse_v3(self, data: Any) -> list[SubtitleCandidate]:
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            return []
        results: list[SubtitleCandidate] = []
        for item in data["data"]:
            attrs = item.get("attributes") if isinstance(item, dict) else None
            if not isinstance(attrs, dict):
                continue
            url = attrs.get("download_url") or attrs.get("url")
            if not url:
                continue
            lang = to_iso639_1(str(attrs.get("language") or "en"))
            filename = str(attrs.get("filename") or "OpenSubtitles")
            rating = attrs.get("ratings", attrs.get("rating"))
            results.append(
                SubtitleCandidate(
                    url=str(url),
                    lang=lang,
                    label=f"{language_label(lang)} - {filename}",
                    source=SubtitleSource.COMMUNITY,
                    rating=_as_float(rating),
                    filename=filename,
                )
            )
        return results

    async def _run_strategy(
        self, strategy: SearchStrategy, languages: Sequence[str]
    ) -> list[SubtitleCandidate]:
        try:
            if self._api_key:
                resp = await self._http.get(
                    V3_SEARCH_URL,
                    params=self._v3_params(strategy, languages),
                    headers={
                        "Api-Key": self._api_key,
                        "User-Agent": self._user_agent,
                        "Accept": "application/json",
                    },
                    timeout=self._timeout,
                )
            else:
                resp = await self._http.get(
                    self._legacy_url(strategy, languages),
                    headers={"User-Agent": self._user_agent, "Accept": "application/json"},
                    timeout=self._timeout,
                )
        except httpx.HTTPError:
            log.warning("opensubtitles_request_failed", query=strategy.query)
            return []

        if resp.status_code != 200:
            log.warning(
                "opensubtitles_http_error",
                query=strategy.query,
                status=resp.status_code,
            )
            return []

        try:
            data = resp.json()
        except ValueError:
            log.warning("opensubtitles_invalid_json", query=strategy.query)
            return []

        return self._parse_v3(data) if self._api_key else self._parse_legacy(data)

    async def search(
        self,
        episode: EpisodeDescriptor,
        languages: Sequence[str],
    ) -> list[SubtitleCandidate]:
        strategies = search_strategies(episode)
        batches = await asyncio.gather(
            *(self._run_strategy(s, languages) for s in strategies)
        )

        seen: set[tuple[str, str]] = set()
        merged: list[SubtitleCandidate] = []
        for batch in batches:
            for sub in batch:
                if sub.dedup_key in seen or not wants_language(languages, sub.lang):
                    continue
                seen.add(sub.dedup_key)
                merged.append(sub)

        merged.sort(key=lambda s: _match_score(s.filename, episode, s.rating), reverse=True)
        results = merged[: self._max_results]

        log.info(
            "opensubtitles_found",
            episode_id=episode.id,
            api="v3" if self._api_key else "legacy",
            strategies=len(strategies),
            merged=len(merged),
            returned=len(results),
        )
        return results
