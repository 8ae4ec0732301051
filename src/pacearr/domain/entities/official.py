"""Official release catalog entities (read-only lookup data)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OfficialQuality:
    """One encoded resolution of an official release variant."""

    resolution: str  # "480p", "720p", "1080p"
    url: str


@dataclass(frozen=True)
class OfficialVariant:
    """A track variant of an official release, e.g. "English Subtitles"."""

    type: str
    qualities: tuple[OfficialQuality, ...] = ()


@dataclass(frozen=True)
class OfficialEntry:
    """All official releases known for one episode key."""

    title: str
    arc_number: int
    variants: tuple[OfficialVariant, ...] = ()

    @property
    def stream_count(self) -> int:
        return sum(len(v.qualities) for v in self.variants)
