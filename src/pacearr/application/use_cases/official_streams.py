"""Official stream provider: first-party links from the static catalog."""

from __future__ import annotations

import re

import structlog

from pacearr.domain.entities.official import OfficialQuality, OfficialVariant
from pacearr.domain.entities.stremio import (
    EpisodeDescriptor,
    StreamCandidate,
    StreamQuality,
    StreamTier,
    TrackType,
)
from pacearr.domain.ports.official_catalog import OfficialCatalogPort

log = structlog.get_logger(__name__)

OFFICIAL_BINGE_GROUP = "onepace-official"
OFFICIAL_PRIORITY = 100

_RESOLUTION_RE = re.compile(r"(\d{3,4})\s*p", re.IGNORECASE)

_HEIGHT_TO_QUALITY: dict[int, StreamQuality] = {
    2160: StreamQuality.UHD_4K,
    1080: StreamQuality.HD_1080P,
    720: StreamQuality.HD_720P,
    576: StreamQuality.SD,
    480: StreamQuality.SD,
    360: StreamQuality.SD,
}


def quality_of(resolution: str) -> StreamQuality:
    """Map a resolution label such as ``"1080p"`` to a ranked quality."""
    m = _RESOLUTION_RE.search(resolution)
    if not m:
        return StreamQuality.UNKNOWN
    return _HEIGHT_TO_QUALITY.get(int(m.group(1)), StreamQuality.UNKNOWN)


def track_type_of(variant_type: str) -> TrackType:
    return TrackType.DUBBED if "dub" in variant_type.lower() else TrackType.SUBTITLED


def _to_candidate(
    episode: EpisodeDescriptor,
    variant: OfficialVariant,
    quality: OfficialQuality,
) -> StreamCandidate:
    track = track_type_of(variant.type)
    return StreamCandidate(
        tier=StreamTier.OFFICIAL,
        url=quality.url,
        title=f"One Pace Official - {quality.resolution} ({variant.type})",
        name=f"{episode.title} - {variant.type}",
        quality=quality.resolution,
        metadata={
            "track_type": track.value,
            "official": True,
            "behaviorHints": {
                "bingeGroup": OFFICIAL_BINGE_GROUP,
                "priority": OFFICIAL_PRIORITY,
                "filename": (
                    f"One Pace - {episode.title} [{quality.resolution}] [{variant.type}].mkv"
                ),
            },
        },
    )


def _rank_key(candidate: StreamCandidate) -> tuple[int, int]:
    quality = quality_of(candidate.quality or "")
    is_dub = candidate.metadata.get("track_type") == TrackType.DUBBED.value
    return (-int(quality), 1 if is_dub else 0)


class OfficialStreamProvider:
    """Builds OFFICIAL-tier candidates for an episode.

    Ordered by quality (highest first), then subtitled before dubbed.
    An episode without an official entry yields an empty list.
    """

    def __init__(self, *, catalog: OfficialCatalogPort) -> None:
        self._catalog = catalog

    def streams_for(self, episode: EpisodeDescriptor) -> list[StreamCandidate]:
        entry = self._catalog.get_entry(episode.id)
        if entry is None:
            log.debug("official_streams_none", episode_id=episode.id)
            return []

        candidates = [
            _to_candidate(episode, variant, quality)
            for variant in entry.variants
            for quality in variant.qualities
        ]
        candidates.sort(key=_rank_key)

        log.info(
            "official_streams_found",
            episode_id=episode.id,
            entry_title=entry.title,
            count=len(candidates),
        )
        return candidates
