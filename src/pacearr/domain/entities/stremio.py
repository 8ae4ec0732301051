"""Domain entities for the Stremio stream pipeline.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any


class StreamTier(IntEnum):
    """Priority class of a stream candidate (lower value = shown first)."""

    OFFICIAL = 0
    DEBRID = 10
    P2P = 20


class SubtitleSource(str, Enum):
    """Where a subtitle track was found."""

    OFFICIAL = "official"
    COMMUNITY = "community"


class TrackType(str, Enum):
    """Audio track flavour of an official release."""

    SUBTITLED = "sub"
    DUBBED = "dub"


class StreamQuality(IntEnum):
    """Ranked quality levels (higher value = better quality)."""

    UNKNOWN = 0
    SD = 30
    HD_720P = 40
    HD_1080P = 50
    UHD_4K = 60


class DebridState(str, Enum):
    """States of one debrid resolution (see DebridResolver)."""

    START = "start"
    CHECK_AVAILABILITY = "check_availability"
    CACHED = "cached"
    NOT_CACHED = "not_cached"
    LOCATE_OR_CREATE_TORRENT = "locate_or_create_torrent"
    AWAIT_LINKS = "await_links"
    SELECT_FILE = "select_file"
    DONE = "done"
    FAIL = "fail"


@dataclass(frozen=True)
class EpisodeDescriptor:
    """Canonical episode metadata resolved from a request id."""

    id: str  # per-episode key, e.g. "RO_1"
    title: str
    season: int | None = None
    episode: int | None = None


@dataclass(frozen=True)
class SubtitleRef:
    """Subtitle reference attached to a stream candidate."""

    url: str
    lang: str
    label: str


@dataclass(frozen=True)
class SubtitleCandidate:
    """A subtitle track found by one of the subtitle sources."""

    url: str
    lang: str
    label: str
    source: SubtitleSource
    rating: float = 0.0
    filename: str = ""

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.lang, self.url)

    def to_ref(self) -> SubtitleRef:
        return SubtitleRef(url=self.url, lang=self.lang, label=self.label)


@dataclass(frozen=True)
class StreamCandidate:
    """One playable stream option returned to the client.

    ``metadata`` carries presentation extras (``behaviorHints`` and, for
    torrent candidates, the untouched raw descriptor fields).
    """

    tier: StreamTier
    url: str
    title: str
    name: str = ""
    quality: str | None = None
    subtitles: tuple[SubtitleRef, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)
    info_hash: str | None = None

    def with_subtitles(self, refs: list[SubtitleRef]) -> StreamCandidate:
        """Return a copy with *refs* appended to the subtitle list."""
        if not refs:
            return self
        return replace(self, subtitles=self.subtitles + tuple(refs))


@dataclass(frozen=True)
class FileLink:
    """A downloadable file inside a debrid job."""

    url: str
    name: str
    size: int = 0


@dataclass
class DebridJob:
    """Transient state of one debrid resolution.

    Lives only for the duration of a single ``DebridResolver.resolve()``
    call and is never cached across requests.
    """

    info_hash: str
    file_index: int = 0
    state: DebridState = DebridState.START
    torrent_id: str | None = None
    availability: bool = False
    links: list[FileLink] = field(default_factory=list)
    selected: FileLink | None = None


@dataclass(frozen=True)
class RawStreamDescriptor:
    """A per-file stream record from the metadata store.

    ``extra`` keeps every other field of the original record so the P2P
    fallback can hand the descriptor to the client unchanged.
    """

    info_hash: str | None
    file_idx: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> RawStreamDescriptor:
        extra = {k: v for k, v in record.items() if k not in ("infoHash", "fileIdx")}
        file_idx = record.get("fileIdx")
        return cls(
            info_hash=record.get("infoHash") or None,
            file_idx=file_idx if isinstance(file_idx, int) and file_idx >= 0 else 0,
            extra=extra,
        )


@dataclass(frozen=True)
class StreamRequest:
    """Parsed Stremio request.

    Created from URL path: ``pp_onepace:1:5`` (compound) or ``RO_1`` (bare).
    """

    raw_id: str
    content_type: str
    credential: str | None = None
