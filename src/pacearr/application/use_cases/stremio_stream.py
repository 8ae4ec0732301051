"""Stremio stream use case: the aggregation pipeline.

request id -> episode -> { official streams, subtitles,
(debrid XOR peer-to-peer) per torrent file } concurrently
-> attach subtitles -> tier order -> candidates.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

import structlog

from pacearr.domain.entities.stremio import (
    EpisodeDescriptor,
    RawStreamDescriptor,
    StreamCandidate,
    StreamRequest,
    SubtitleRef,
)
from pacearr.domain.ports.metadata import MetadataStorePort

from .debrid_resolve import DebridResolver
from .episode_resolver import EpisodeResolver
from .official_streams import OfficialStreamProvider
from .subtitle_aggregate import SubtitleAggregator

log = structlog.get_logger(__name__)

SUPPORTED_CONTENT_TYPES = frozenset({"series"})

# Injected pure function building the peer-to-peer candidate of a descriptor.
_P2PFn = Callable[[RawStreamDescriptor, EpisodeDescriptor], StreamCandidate | None]


class StremioStreamUseCase:
    """Resolve Stremio stream requests into ordered candidates.

    Flow:
        1. Resolve the request id to an episode (empty result if unknown).
        2. Concurrently: official streams, subtitles, and the torrent
           branch, which loads the raw descriptors and runs one task per
           torrent file. With a credential every file goes through the
           debrid resolver only; without one each becomes a P2P candidate.
        3. Attach the subtitle list to every candidate.
        4. Order OFFICIAL first, then debrid/P2P in descriptor order.

    The debrid-vs-P2P mode is chosen once per request from the credential.
    A failed debrid resolution yields nothing for that file.
    """

    def __init__(
        self,
        *,
        episodes: EpisodeResolver,
        metadata: MetadataStorePort,
        official: OfficialStreamProvider,
        subtitles: SubtitleAggregator,
        debrid: DebridResolver,
        p2p_fn: _P2PFn,
    ) -> None:
        self._episodes = episodes
        self._metadata = metadata
        self._official = official
        self._subtitles = subtitles
        self._debrid = debrid
        self._p2p_fn = p2p_fn

    async def execute(self, request: StreamRequest) -> list[StreamCandidate]:
        if request.content_type not in SUPPORTED_CONTENT_TYPES:
            log.info(
                "stremio_stream_unsupported_type",
                content_type=request.content_type,
                raw_id=request.raw_id,
            )
            return []

        episode = await self._episodes.resolve(request.raw_id)
        if episode is None:
            return []

        return await self.streams_for(episode, credential=request.credential)

    async def streams_for(
        self,
        episode: EpisodeDescriptor,
        *,
        credential: str | None = None,
        languages: Sequence[str] | None = None,
    ) -> list[StreamCandidate]:
        debrid_mode = bool(credential)

        log.info(
            "stremio_stream_start",
            episode_id=episode.id,
            mode="debrid" if debrid_mode else "p2p",
        )

        official, subtitle_refs, torrent = await asyncio.gather(
            self._official_streams(episode),
            self._subtitles.refs_for(episode, languages),
            self._torrent_streams(episode, credential),
        )

        candidates = [c.with_subtitles(subtitle_refs) for c in (*official, *torrent)]
        # Stable: official first, then file-descriptor order.
        candidates.sort(key=lambda c: c.tier)

        log.info(
            "stremio_stream_complete",
            episode_id=episode.id,
            official=len(official),
            torrent=len(torrent),
            subtitles=len(subtitle_refs),
            total=len(candidates),
        )
        return candidates

    async def subtitles(
        self,
        request: StreamRequest,
        languages: Sequence[str] | None = None,
    ) -> list[SubtitleRef]:
        """Subtitle references alone for the requested episode."""
        if request.content_type not in SUPPORTED_CONTENT_TYPES:
            return []
        episode = await self._episodes.resolve(request.raw_id)
        if episode is None:
            return []
        return await self._subtitles.refs_for(episode, languages)

    async def _official_streams(self, episode: EpisodeDescriptor) -> list[StreamCandidate]:
        try:
            return self._official.streams_for(episode)
        except Exception:
            log.warning("official_streams_failed", episode_id=episode.id, exc_info=True)
            return []

    async def _torrent_streams(
        self,
        episode: EpisodeDescriptor,
        credential: str | None,
    ) -> list[StreamCandidate]:
        descriptors = await self._metadata.get_stream_descriptors(episode.id)
        torrents = [d for d in descriptors if d.info_hash]

        if not credential:
            results = [self._p2p_fn(d, episode) for d in torrents]
            return [c for c in results if c is not None]

        # Each file resolves independently; a stalled one does not block siblings.
        resolved = await asyncio.gather(
            *(
                self._resolve_debrid(d.info_hash, d.file_idx, credential)
                for d in torrents
                if d.info_hash
            )
        )
        return [c for c in resolved if c is not None]

    async def _resolve_debrid(
        self,
        info_hash: str,
        file_idx: int,
        credential: str,
    ) -> StreamCandidate | None:
        try:
            return await self._debrid.resolve(
                info_hash,
                api_key=credential,
                file_index=file_idx,
            )
        except Exception:
            log.warning(
                "debrid_resolve_crashed",
                info_hash=info_hash,
                file_index=file_idx,
                exc_info=True,
            )
            return None
