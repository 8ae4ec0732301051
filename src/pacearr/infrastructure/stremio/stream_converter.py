"""Stream candidate construction and Stremio protocol serialization.

Pure transformation logic: no I/O, no framework dependencies.
"""

from __future__ import annotations

from typing import Any

from pacearr.domain.entities.stremio import (
    EpisodeDescriptor,
    RawStreamDescriptor,
    StreamCandidate,
    StreamTier,
    SubtitleRef,
)

P2P_BINGE_GROUP = "onepace-torrent"


def magnet_uri(info_hash: str) -> str:
    return f"magnet:?xt=urn:btih:{info_hash}"


def build_p2p_candidate(
    descriptor: RawStreamDescriptor,
    episode: EpisodeDescriptor,
) -> StreamCandidate | None:
    """Wrap a raw torrent descriptor as a P2P candidate.

    The descriptor's own fields are carried unchanged in ``metadata``;
    only the binge group is merged into its ``behaviorHints``.
    Returns None for descriptors without an info-hash.
    """
    if not descriptor.info_hash:
        return None

    metadata: dict[str, Any] = dict(descriptor.extra)
    hints = metadata.get("behaviorHints")
    metadata["behaviorHints"] = {
        **(hints if isinstance(hints, dict) else {}),
        "bingeGroup": P2P_BINGE_GROUP,
    }
    metadata["fileIdx"] = descriptor.file_idx

    return StreamCandidate(
        tier=StreamTier.P2P,
        url=magnet_uri(descriptor.info_hash),
        title=f"Torrent - {episode.title}",
        name=str(descriptor.extra.get("name", "")),
        metadata=metadata,
        info_hash=descriptor.info_hash,
    )


def subtitle_to_stremio(ref: SubtitleRef, index: int) -> dict[str, str]:
    return {
        "id": f"{ref.lang}-{index}",
        "url": ref.url,
        "lang": ref.lang,
        "label": ref.label,
    }


def candidate_to_stremio(candidate: StreamCandidate) -> dict[str, Any]:
    """Convert a candidate into a Stremio stream object.

    Torrent candidates are emitted as ``infoHash``/``fileIdx`` streams
    (no ``url``); every other tier is a direct HTTP stream.
    """
    stream: dict[str, Any] = {}

    if candidate.tier == StreamTier.P2P and candidate.info_hash:
        stream.update(candidate.metadata)
        stream["infoHash"] = candidate.info_hash
        stream.setdefault("fileIdx", 0)
    else:
        stream["url"] = candidate.url
        hints = candidate.metadata.get("behaviorHints")
        if hints:
            stream["behaviorHints"] = dict(hints)

    if candidate.name:
        stream["name"] = candidate.name
    stream["title"] = candidate.title

    if candidate.subtitles:
        stream["subtitles"] = [
            subtitle_to_stremio(ref, idx) for idx, ref in enumerate(candidate.subtitles)
        ]
    return stream
