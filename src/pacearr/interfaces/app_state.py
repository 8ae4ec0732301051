"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from pacearr.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from pacearr.application.use_cases.stremio_catalog import StremioCatalogUseCase
    from pacearr.application.use_cases.stremio_stream import StremioStreamUseCase
    from pacearr.domain.ports import (
        DebridServicePort,
        MetadataStorePort,
        OfficialCatalogPort,
    )


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    No per-request data (credentials included) is ever stored here.
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient

    # Domain Ports
    metadata: MetadataStorePort
    official_catalog: OfficialCatalogPort
    debrid: DebridServicePort

    # Stremio
    stremio_stream_uc: StremioStreamUseCase
    stremio_catalog_uc: StremioCatalogUseCase
