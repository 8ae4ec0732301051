"""Subtitle aggregation over the official and community sources."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol

import structlog

from pacearr.domain.entities.stremio import (
    EpisodeDescriptor,
    SubtitleCandidate,
    SubtitleRef,
    SubtitleSource,
)
from pacearr.domain.ports.subtitles import SubtitleSourcePort

log = structlog.get_logger(__name__)

OFFICIAL_RATING = 10.0


class _SubtitleConfig(Protocol):
    """Configuration values consumed by SubtitleAggregator."""

    languages: list[str]
    max_results: int
    community_rating_discount: float
    timeout_seconds: float


def rank_subtitles(
    official: list[SubtitleCandidate],
    community: list[SubtitleCandidate],
    *,
    max_results: int,
) -> list[SubtitleCandidate]:
    """Deduplicate on (lang, url) and order official-first, then by rating.

    Official entries win deduplication against community ones.
    """
    seen: set[tuple[str, str]] = set()
    merged: list[SubtitleCandidate] = []
    for sub in [*official, *community]:
        if sub.dedup_key in seen:
            continue
        seen.add(sub.dedup_key)
        merged.append(sub)

    merged.sort(key=lambda s: (s.source != SubtitleSource.OFFICIAL, -s.rating))
    return merged[:max_results]


class SubtitleAggregator:
    """Queries both subtitle sources concurrently and ranks the union.

    A source that errors or exceeds the timeout contributes nothing.
    """

    def __init__(
        self,
        *,
        official: SubtitleSourcePort,
        community: SubtitleSourcePort,
        config: _SubtitleConfig,
    ) -> None:
        self._official = official
        self._community = community
        self._default_languages = list(config.languages)
        self._max_results = config.max_results
        self._discount = config.community_rating_discount
        self._timeout = config.timeout_seconds

    async def _query(
        self,
        source: SubtitleSourcePort,
        episode: EpisodeDescriptor,
        languages: Sequence[str],
    ) -> list[SubtitleCandidate]:
        try:
            return await asyncio.wait_for(
                source.search(episode, languages), timeout=self._timeout
            )
        except TimeoutError:
            log.warning(
                "subtitle_source_timeout",
                source=source.name,
                episode_id=episode.id,
                timeout=self._timeout,
            )
        except Exception:
            log.warning(
                "subtitle_source_failed",
                source=source.name,
                episode_id=episode.id,
                exc_info=True,
            )
        return []

    async def aggregate(
        self,
        episode: EpisodeDescriptor,
        languages: Sequence[str] | None = None,
    ) -> list[SubtitleCandidate]:
        langs = list(languages) if languages else self._default_languages

        official_raw, community_raw = await asyncio.gather(
            self._query(self._official, episode, langs),
            self._query(self._community, episode, langs),
        )

        official = [
            replace(s, source=SubtitleSource.OFFICIAL, rating=OFFICIAL_RATING)
            for s in official_raw
        ]
        community = [
            replace(s, source=SubtitleSource.COMMUNITY, rating=s.rating * self._discount)
            for s in community_raw
        ]
        ranked = rank_subtitles(official, community, max_results=self._max_results)

        log.info(
            "subtitles_aggregated",
            episode_id=episode.id,
            languages=langs,
            official=len(official),
            community=len(community),
            returned=len(ranked),
        )
        return ranked

    async def refs_for(
        self,
        episode: EpisodeDescriptor,
        languages: Sequence[str] | None = None,
    ) -> list[SubtitleRef]:
        return [s.to_ref() for s in await self.aggregate(episode, languages)]
