from .debrid_resolve import DebridResolver
from .episode_resolver import EpisodeResolver
from .official_streams import OfficialStreamProvider
from .stremio_catalog import StremioCatalogUseCase
from .stremio_stream import StremioStreamUseCase
from .subtitle_aggregate import SubtitleAggregator

__all__ = [
    "DebridResolver",
    "EpisodeResolver",
    "OfficialStreamProvider",
    "StremioCatalogUseCase",
    "StremioStreamUseCase",
    "SubtitleAggregator",
]
