"""Episode resolution: request id -> canonical EpisodeDescriptor.

Two id shapes are accepted:

- compound ``<series>:<season>:<episode>`` (e.g. ``pp_onepace:1:3``), matched
  against the series' indexed episode list by exact (season, episode);
- bare per-episode key ``<ARC>_<n>`` (e.g. ``RO_1``), used as-is with a
  synthesized title.

Anything else is rejected before a provider is touched.
"""

from __future__ import annotations

import re

import structlog

from pacearr.domain.entities.stremio import EpisodeDescriptor
from pacearr.domain.ports.metadata import MetadataStorePort

log = structlog.get_logger(__name__)

_EPISODE_KEY_RE = re.compile(r"^[A-Za-z]+_\d+$")
_NON_NEGATIVE_INT_RE = re.compile(r"^\d+$")


def parse_compound_id(raw_id: str, series_id: str) -> tuple[int, int] | None:
    """Return (season, episode) for ``<series>:<season>:<episode>``, else None."""
    parts = raw_id.split(":")
    if len(parts) != 3 or parts[0] != series_id:
        return None
    season_s, episode_s = parts[1], parts[2]
    if not (_NON_NEGATIVE_INT_RE.match(season_s) and _NON_NEGATIVE_INT_RE.match(episode_s)):
        return None
    return int(season_s), int(episode_s)


def is_episode_key(raw_id: str) -> bool:
    return bool(_EPISODE_KEY_RE.match(raw_id))


def _as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _NON_NEGATIVE_INT_RE.match(value):
        return int(value)
    return None


class EpisodeResolver:
    """Resolves request ids against the metadata store.

    Failures are signalled by ``None``; the resolver never raises for a
    malformed or unknown id and never retries.
    """

    def __init__(self, *, metadata: MetadataStorePort, series_id: str) -> None:
        self._metadata = metadata
        self._series_id = series_id

    async def resolve(self, raw_id: str) -> EpisodeDescriptor | None:
        if ":" in raw_id:
            return await self._resolve_compound(raw_id)

        if is_episode_key(raw_id):
            return EpisodeDescriptor(id=raw_id, title=f"Episode {raw_id}")

        log.info("episode_id_rejected", raw_id=raw_id, reason="malformed")
        return None

    async def _resolve_compound(self, raw_id: str) -> EpisodeDescriptor | None:
        parsed = parse_compound_id(raw_id, self._series_id)
        if parsed is None:
            log.info("episode_id_rejected", raw_id=raw_id, reason="malformed_compound")
            return None
        season, episode = parsed

        videos = await self._metadata.list_episodes(self._series_id)
        for video in videos:
            if _as_int(video.get("season")) != season or _as_int(video.get("episode")) != episode:
                continue
            episode_id = video.get("id")
            if not isinstance(episode_id, str) or not episode_id:
                continue
            title = video.get("title") or video.get("name") or f"Episode {episode_id}"
            descriptor = EpisodeDescriptor(
                id=episode_id,
                title=str(title),
                season=season,
                episode=episode,
            )
            log.debug("episode_resolved", raw_id=raw_id, episode_id=episode_id)
            return descriptor

        log.info(
            "episode_not_found",
            raw_id=raw_id,
            season=season,
            episode=episode,
            indexed=len(videos),
        )
        return None
