from .debrid import DebridServicePort
from .metadata import MetadataStorePort
from .official_catalog import OfficialCatalogPort
from .subtitles import SubtitleSourcePort

__all__ = [
    "DebridServicePort",
    "MetadataStorePort",
    "OfficialCatalogPort",
    "SubtitleSourcePort",
]
