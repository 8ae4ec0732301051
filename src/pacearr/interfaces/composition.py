"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from pacearr.application.use_cases.debrid_resolve import DebridResolver
from pacearr.application.use_cases.episode_resolver import EpisodeResolver
from pacearr.application.use_cases.official_streams import OfficialStreamProvider
from pacearr.application.use_cases.stremio_catalog import StremioCatalogUseCase
from pacearr.application.use_cases.stremio_stream import StremioStreamUseCase
from pacearr.application.use_cases.subtitle_aggregate import SubtitleAggregator
from pacearr.infrastructure.config.schema import AppConfig
from pacearr.infrastructure.debrid.torbox import TorboxClient
from pacearr.infrastructure.metadata.json_store import JsonMetadataStore
from pacearr.infrastructure.official.catalog import YamlOfficialCatalog
from pacearr.infrastructure.stremio.stream_converter import build_p2p_candidate
from pacearr.infrastructure.subtitles.onepace_repository import (
    OnePaceSubtitleRepository,
)
from pacearr.infrastructure.subtitles.opensubtitles import OpenSubtitlesSource
from pacearr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def wire_services(state: AppState, config: AppConfig) -> None:
    """Build ports and use cases on *state* around an existing HTTP client."""
    http = state.http_client

    # 1) Ports
    state.metadata = JsonMetadataStore(config.data_dir)
    state.official_catalog = YamlOfficialCatalog.from_file()
    state.debrid = TorboxClient(
        http,
        base_url=config.torbox.base_url,
        timeout=config.http_timeout_seconds,
    )
    log.info(
        "ports_initialized",
        data_dir=str(config.data_dir),
        official_episodes=len(state.official_catalog.available_episodes()),
        debrid=state.debrid.name,
    )

    # 2) Subtitle sources
    subtitles = SubtitleAggregator(
        official=OnePaceSubtitleRepository(http, timeout=config.subtitles.timeout_seconds),
        community=OpenSubtitlesSource(
            http,
            api_key=config.subtitles.opensubtitles_api_key,
            user_agent=config.subtitles.opensubtitles_user_agent,
            max_results=config.subtitles.community_max_results,
            timeout=config.subtitles.timeout_seconds,
        ),
        config=config.subtitles,
    )

    # 3) Stremio use cases
    state.stremio_stream_uc = StremioStreamUseCase(
        episodes=EpisodeResolver(
            metadata=state.metadata,
            series_id=config.stremio.series_id,
        ),
        metadata=state.metadata,
        official=OfficialStreamProvider(catalog=state.official_catalog),
        subtitles=subtitles,
        debrid=DebridResolver(service=state.debrid),
        p2p_fn=build_p2p_candidate,
    )
    state.stremio_catalog_uc = StremioCatalogUseCase(
        metadata=state.metadata,
        series_id=config.stremio.series_id,
        catalog_id=config.stremio.catalog_id,
    )
    log.info(
        "stremio_use_cases_initialized",
        series_id=config.stremio.series_id,
        default_debrid_key=config.torbox.api_key is not None,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP Client (shared by every remote adapter)
        2. Ports (metadata store, official catalog, debrid client)
        3. Use cases
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    try:
        # 2-3) Ports and use cases
        wire_services(state, config)
        log.info("app_startup_complete")

        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
