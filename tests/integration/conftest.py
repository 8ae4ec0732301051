"""Shared fixtures for integration tests.

These tests use real infrastructure components (JsonMetadataStore,
YamlOfficialCatalog, TorboxClient, subtitle sources) with mocked HTTP
via respx.
"""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
import respx

_ENV_KEYS = (
    "TORBOX_API_KEY",
    "OPENSUBTITLES_API_KEY",
    "PACEARR_TORBOX_API_KEY",
    "PACEARR_OPENSUBTITLES_API_KEY",
    "PACEARR_DATA_DIR",
    "PACEARR_LOG_LEVEL",
    "PACEARR_LOG_FORMAT",
    "PACEARR_ENVIRONMENT",
    "PACEARR_HTTP_TIMEOUT_SECONDS",
    "PACEARR_SERIES_ID",
    "PACEARR_SUBTITLE_LANGUAGES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shells and .env files out of the config layers."""
    for key in _ENV_KEYS:
        # set-then-delete so teardown restores the original value
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture()
def http_client() -> httpx.AsyncClient:
    """Real httpx.AsyncClient for use with respx mocking."""
    return httpx.AsyncClient()


@pytest.fixture()
def respx_mock() -> Iterator[respx.MockRouter]:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router
