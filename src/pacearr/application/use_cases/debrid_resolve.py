"""Debrid resolution: torrent info-hash -> direct playable URL.

One resolution walks a small state machine:

    START -> CHECK_AVAILABILITY -> CACHED -> LOCATE_OR_CREATE_TORRENT
          -> AWAIT_LINKS -> SELECT_FILE -> DONE
    START -> CHECK_AVAILABILITY -> NOT_CACHED -> FAIL

The remote calls are strictly sequential, each made once (no polling, no
retries). Any service error terminates the job; ``resolve()`` reports
failure by returning ``None`` and never raises ``DebridError``.
"""

from __future__ import annotations

import structlog
from guessit import guessit

from pacearr.domain.entities.exceptions import DebridError
from pacearr.domain.entities.stremio import (
    DebridJob,
    DebridState,
    FileLink,
    StreamCandidate,
    StreamTier,
)
from pacearr.domain.ports.debrid import DebridServicePort

log = structlog.get_logger(__name__)

DEBRID_BINGE_GROUP = "onepace-torbox"

VIDEO_EXTENSIONS = frozenset(
    {".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm", ".m4v", ".ts", ".m2ts"}
)


def is_video_file(filename: str) -> bool:
    dot = filename.rfind(".")
    if dot < 0:
        return False
    return filename[dot:].lower() in VIDEO_EXTENSIONS


def select_file(links: list[FileLink], file_index: int) -> FileLink | None:
    """Pick the requested file from a job's links.

    Video files sorted by size (largest first) are indexed first; if the
    index is out of range there, the unsorted link at the same index is
    used instead.
    """
    videos = sorted(
        (link for link in links if is_video_file(link.name)),
        key=lambda link: link.size,
        reverse=True,
    )
    if 0 <= file_index < len(videos):
        return videos[file_index]
    if 0 <= file_index < len(links):
        return links[file_index]
    return None


def quality_from_filename(filename: str) -> str | None:
    """Screen size (e.g. ``"1080p"``) guessed from a release file name."""
    screen_size = guessit(filename).get("screen_size")
    return str(screen_size) if screen_size else None


class DebridResolver:
    """Drives a ``DebridServicePort`` through one resolution per call.

    The credential is an explicit argument of ``resolve()``; nothing about
    a resolution outlives the call.
    """

    def __init__(self, *, service: DebridServicePort) -> None:
        self._service = service

    def _transition(self, job: DebridJob, state: DebridState, **context: object) -> None:
        log.debug(
            "debrid_state",
            service=self._service.name,
            info_hash=job.info_hash,
            file_index=job.file_index,
            from_state=job.state.value,
            to_state=state.value,
            **context,
        )
        job.state = state

    def _fail(self, job: DebridJob, reason: str, **context: object) -> None:
        self._transition(job, DebridState.FAIL, reason=reason)
        log.info(
            f"debrid_{reason}",
            service=self._service.name,
            info_hash=job.info_hash,
            file_index=job.file_index,
            **context,
        )

    async def resolve(
        self,
        info_hash: str,
        *,
        api_key: str,
        file_index: int = 0,
    ) -> StreamCandidate | None:
        job = DebridJob(info_hash=info_hash, file_index=max(file_index, 0))

        # CHECK_AVAILABILITY: errors count as "not cached".
        self._transition(job, DebridState.CHECK_AVAILABILITY)
        try:
            job.availability = await self._service.check_availability(
                info_hash, api_key=api_key
            )
        except DebridError as e:
            self._transition(job, DebridState.NOT_CACHED)
            self._fail(job, "availability_error", error=str(e))
            return None

        if not job.availability:
            self._transition(job, DebridState.NOT_CACHED)
            self._fail(job, "not_cached")
            return None
        self._transition(job, DebridState.CACHED)

        # LOCATE_OR_CREATE_TORRENT
        self._transition(job, DebridState.LOCATE_OR_CREATE_TORRENT)
        try:
            job.torrent_id = await self._service.find_job(info_hash, api_key=api_key)
            if job.torrent_id is None:
                job.torrent_id = await self._service.create_job(info_hash, api_key=api_key)
        except DebridError as e:
            self._fail(job, "job_error", error=str(e))
            return None
        if job.torrent_id is None:
            self._fail(job, "job_missing")
            return None

        # AWAIT_LINKS: a single attempt.
        self._transition(job, DebridState.AWAIT_LINKS, torrent_id=job.torrent_id)
        try:
            job.links = await self._service.list_links(job.torrent_id, api_key=api_key)
        except DebridError as e:
            self._fail(job, "links_error", torrent_id=job.torrent_id, error=str(e))
            return None
        if not job.links:
            self._fail(job, "no_links", torrent_id=job.torrent_id)
            return None

        # SELECT_FILE
        self._transition(job, DebridState.SELECT_FILE, link_count=len(job.links))
        job.selected = select_file(job.links, job.file_index)
        if job.selected is None:
            self._fail(job, "file_not_found", link_count=len(job.links))
            return None

        self._transition(job, DebridState.DONE)
        log.info(
            "debrid_resolved",
            service=self._service.name,
            info_hash=info_hash,
            file_index=job.file_index,
            torrent_id=job.torrent_id,
            file_name=job.selected.name,
        )
        return StreamCandidate(
            tier=StreamTier.DEBRID,
            url=job.selected.url,
            title=f"Torbox (Instant) - {job.selected.name}",
            quality=quality_from_filename(job.selected.name),
            metadata={
                "behaviorHints": {"bingeGroup": DEBRID_BINGE_GROUP},
                "size": job.selected.size,
            },
            info_hash=info_hash,
        )
