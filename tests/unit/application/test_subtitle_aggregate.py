"""Tests for SubtitleAggregator and ranking."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from pacearr.application.use_cases.subtitle_aggregate import (
    SubtitleAggregator,
    rank_subtitles,
)
from pacearr.domain.entities import (
    EpisodeDescriptor,
    SubtitleCandidate,
    SubtitleRef,
    SubtitleSource,
)
from pacearr.infrastructure.config.schema import SubtitleConfig


def _sub(
    url: str,
    *,
    lang: str = "en",
    source: SubtitleSource = SubtitleSource.COMMUNITY,
    rating: float = 0.0,
) -> SubtitleCandidate:
    return SubtitleCandidate(url=url, lang=lang, label=url, source=source, rating=rating)


def _source(name: str, results: list[SubtitleCandidate] | None = None) -> AsyncMock:
    source = AsyncMock()
    source.name = name
    source.search = AsyncMock(return_value=results or [])
    return source


class TestRankSubtitles:
    def test_official_first_then_rating(self) -> None:
        official = [_sub("o1", source=SubtitleSource.OFFICIAL, rating=10)]
        community = [_sub("c1", rating=2), _sub("c2", rating=4)]

        ranked = rank_subtitles(official, community, max_results=20)

        assert [s.url for s in ranked] == ["o1", "c2", "c1"]

    def test_official_wins_dedup(self) -> None:
        official = [_sub("same", source=SubtitleSource.OFFICIAL, rating=10)]
        community = [_sub("same", rating=5)]

        ranked = rank_subtitles(official, community, max_results=20)

        assert len(ranked) == 1
        assert ranked[0].source == SubtitleSource.OFFICIAL

    def test_same_url_different_language_kept(self) -> None:
        ranked = rank_subtitles([], [_sub("u", lang="en"), _sub("u", lang="es")], max_results=20)
        assert len(ranked) == 2

    def test_cap(self) -> None:
        community = [_sub(f"c{i}", rating=i) for i in range(30)]
        ranked = rank_subtitles([], community, max_results=20)
        assert len(ranked) == 20
        assert ranked[0].url == "c29"


class TestAggregate:
    @pytest.mark.asyncio()
    async def test_ratings_normalized(
        self, episode: EpisodeDescriptor, subtitle_config: SubtitleConfig
    ) -> None:
        official = _source("onepace", [_sub("o1", source=SubtitleSource.COMMUNITY, rating=1)])
        community = _source("opensubtitles", [_sub("c1", rating=8)])
        aggregator = SubtitleAggregator(
            official=official, community=community, config=subtitle_config
        )

        result = await aggregator.aggregate(episode)

        assert [(s.url, s.source, s.rating) for s in result] == [
            ("o1", SubtitleSource.OFFICIAL, 10.0),
            ("c1", SubtitleSource.COMMUNITY, 4.0),
        ]

    @pytest.mark.asyncio()
    async def test_default_languages_passed(
        self, episode: EpisodeDescriptor, subtitle_config: SubtitleConfig
    ) -> None:
        official = _source("onepace")
        community = _source("opensubtitles")
        aggregator = SubtitleAggregator(
            official=official, community=community, config=subtitle_config
        )

        await aggregator.aggregate(episode)

        official.search.assert_awaited_once_with(episode, ["en"])
        community.search.assert_awaited_once_with(episode, ["en"])

    @pytest.mark.asyncio()
    async def test_explicit_languages(
        self, episode: EpisodeDescriptor, subtitle_config: SubtitleConfig
    ) -> None:
        official = _source("onepace")
        aggregator = SubtitleAggregator(
            official=official, community=_source("opensubtitles"), config=subtitle_config
        )

        await aggregator.aggregate(episode, ["all"])

        official.search.assert_awaited_once_with(episode, ["all"])

    @pytest.mark.asyncio()
    async def test_failing_source_contributes_nothing(
        self, episode: EpisodeDescriptor, subtitle_config: SubtitleConfig
    ) -> None:
        official = _source("onepace", [_sub("o1")])
        community = _source("opensubtitles")
        community.search.side_effect = RuntimeError("down")
        aggregator = SubtitleAggregator(
            official=official, community=community, config=subtitle_config
        )

        result = await aggregator.aggregate(episode)

        assert [s.url for s in result] == ["o1"]

    @pytest.mark.asyncio()
    async def test_slow_source_times_out(self, episode: EpisodeDescriptor) -> None:
        async def _hang(*_args: object) -> list[SubtitleCandidate]:
            await asyncio.sleep(5)
            return [_sub("late")]

        official = _source("onepace")
        official.search.side_effect = _hang
        community = _source("opensubtitles", [_sub("c1", rating=2)])
        aggregator = SubtitleAggregator(
            official=official,
            community=community,
            config=SubtitleConfig(timeout_seconds=0.05),
        )

        result = await aggregator.aggregate(episode)

        assert [s.url for s in result] == ["c1"]

    @pytest.mark.asyncio()
    async def test_refs_for(
        self, episode: EpisodeDescriptor, subtitle_config: SubtitleConfig
    ) -> None:
        aggregator = SubtitleAggregator(
            official=_source("onepace", [_sub("o1")]),
            community=_source("opensubtitles"),
            config=subtitle_config,
        )

        refs = await aggregator.refs_for(episode)

        assert refs == [SubtitleRef(url="o1", lang="en", label="o1")]
