"""Tests for stream candidate construction and Stremio serialization."""

from __future__ import annotations

from pacearr.domain.entities import (
    EpisodeDescriptor,
    RawStreamDescriptor,
    StreamCandidate,
    StreamTier,
    SubtitleRef,
)
from pacearr.infrastructure.stremio.stream_converter import (
    P2P_BINGE_GROUP,
    build_p2p_candidate,
    candidate_to_stremio,
    magnet_uri,
    subtitle_to_stremio,
)

_EPISODE = EpisodeDescriptor(id="RO_1", title="Romance Dawn", season=1, episode=1)
_SUB = SubtitleRef(url="https://raw/RO_1.en.srt", lang="en", label="English")


class TestMagnetUri:
    def test_btih(self) -> None:
        assert magnet_uri("abc123") == "magnet:?xt=urn:btih:abc123"


class TestBuildP2PCandidate:
    def test_no_hash(self) -> None:
        assert build_p2p_candidate(RawStreamDescriptor(info_hash=None), _EPISODE) is None

    def test_fields(self) -> None:
        descriptor = RawStreamDescriptor(
            info_hash="abc123",
            file_idx=2,
            extra={
                "name": "One Pace",
                "title": "[One Pace] Romance Dawn 01",
                "behaviorHints": {"filename": "Romance Dawn 01.mkv"},
                "sources": ["tracker:udp://x"],
            },
        )

        c = build_p2p_candidate(descriptor, _EPISODE)

        assert c is not None
        assert c.tier == StreamTier.P2P
        assert c.info_hash == "abc123"
        assert c.url == "magnet:?xt=urn:btih:abc123"
        assert c.title == "Torrent - Romance Dawn"
        assert c.name == "One Pace"
        assert c.metadata["fileIdx"] == 2
        assert c.metadata["sources"] == ["tracker:udp://x"]
        assert c.metadata["behaviorHints"] == {
            "filename": "Romance Dawn 01.mkv",
            "bingeGroup": P2P_BINGE_GROUP,
        }

    def test_descriptor_not_mutated(self) -> None:
        hints = {"filename": "a.mkv"}
        descriptor = RawStreamDescriptor(info_hash="h", extra={"behaviorHints": hints})
        build_p2p_candidate(descriptor, _EPISODE)
        assert hints == {"filename": "a.mkv"}


class TestSubtitleToStremio:
    def test_shape(self) -> None:
        assert subtitle_to_stremio(_SUB, 3) == {
            "id": "en-3",
            "url": "https://raw/RO_1.en.srt",
            "lang": "en",
            "label": "English",
        }


class TestCandidateToStremio:
    def test_official_stream(self) -> None:
        c = StreamCandidate(
            tier=StreamTier.OFFICIAL,
            url="https://pixeldrain.com/api/file/x",
            title="One Pace Official - 1080p (English Subtitles)",
            name="Romance Dawn - English Subtitles",
            quality="1080p",
            subtitles=(_SUB,),
            metadata={"track_type": "sub", "behaviorHints": {"bingeGroup": "onepace-official"}},
        )

        stream = candidate_to_stremio(c)

        assert stream == {
            "url": "https://pixeldrain.com/api/file/x",
            "behaviorHints": {"bingeGroup": "onepace-official"},
            "name": "Romance Dawn - English Subtitles",
            "title": "One Pace Official - 1080p (English Subtitles)",
            "subtitles": [subtitle_to_stremio(_SUB, 0)],
        }

    def test_p2p_stream_has_no_url(self) -> None:
        c = build_p2p_candidate(
            RawStreamDescriptor(info_hash="abc123", file_idx=1, extra={"name": "One Pace"}),
            _EPISODE,
        )
        assert c is not None

        stream = candidate_to_stremio(c)

        assert "url" not in stream
        assert stream["infoHash"] == "abc123"
        assert stream["fileIdx"] == 1
        assert stream["name"] == "One Pace"
        assert stream["title"] == "Torrent - Romance Dawn"
        assert "subtitles" not in stream

    def test_debrid_stream(self) -> None:
        c = StreamCandidate(
            tier=StreamTier.DEBRID,
            url="https://api.torbox.app/v1/api/torrents/requestdl?token=x",
            title="Torbox (Instant) - ep.mkv",
            info_hash="abc123",
        )

        stream = candidate_to_stremio(c)

        assert stream["url"].startswith("https://api.torbox.app/")
        assert "infoHash" not in stream
        assert "behaviorHints" not in stream
