"""Port for subtitle sources."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pacearr.domain.entities.stremio import EpisodeDescriptor, SubtitleCandidate


@runtime_checkable
class SubtitleSourcePort(Protocol):
    """Finds subtitle tracks for an episode."""

    @property
    def name(self) -> str:
        """Source name used in logs (e.g. 'onepace', 'opensubtitles')."""
        ...

    async def search(
        self,
        episode: EpisodeDescriptor,
        languages: Sequence[str],
    ) -> list[SubtitleCandidate]:
        """Return normalized subtitle candidates.

        *languages* holds ISO 639-1 codes or the single sentinel ``"all"``.
        """
        ...
