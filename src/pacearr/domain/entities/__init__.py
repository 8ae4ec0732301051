from .exceptions import (
    CatalogLoadError,
    DebridAuthError,
    DebridError,
    DebridServiceError,
)
from .official import OfficialEntry, OfficialQuality, OfficialVariant
from .stremio import (
    DebridJob,
    DebridState,
    EpisodeDescriptor,
    FileLink,
    RawStreamDescriptor,
    StreamCandidate,
    StreamQuality,
    StreamRequest,
    StreamTier,
    SubtitleCandidate,
    SubtitleRef,
    SubtitleSource,
    TrackType,
)

__all__ = [
    "CatalogLoadError",
    "DebridAuthError",
    "DebridError",
    "DebridJob",
    "DebridServiceError",
    "DebridState",
    "EpisodeDescriptor",
    "FileLink",
    "OfficialEntry",
    "OfficialQuality",
    "OfficialVariant",
    "RawStreamDescriptor",
    "StreamCandidate",
    "StreamQuality",
    "StreamRequest",
    "StreamTier",
    "SubtitleCandidate",
    "SubtitleRef",
    "SubtitleSource",
    "TrackType",
]
