"""End-to-end stream pipeline through the real app and adapters.

Runs create_app() with its lifespan (real JsonMetadataStore, bundled
official catalog, TorboxClient and subtitle sources) and intercepts all
outgoing HTTP with respx.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import parse_qs, urlparse

import pytest
import respx
from fastapi.testclient import TestClient

from pacearr.infrastructure.config import AppConfig
from pacearr.infrastructure.debrid.torbox import DEFAULT_BASE_URL
from pacearr.infrastructure.subtitles.onepace_repository import (
    CONTENTS_API_URL,
    RAW_BASE_URL,
)
from pacearr.infrastructure.subtitles.opensubtitles import LEGACY_SEARCH_URL
from pacearr.interfaces.app import create_app

pytestmark = pytest.mark.integration

_KEY = "tb-key-0123456789"
_STREAM = "/api/v1/stremio/stream/series/pp_onepace:1:1.json"
_SUB_URL = f"{RAW_BASE_URL}/RO_1/RO_1.en.srt"


@pytest.fixture()
def config(data_dir: Path) -> AppConfig:
    return AppConfig.model_validate({"data": {"dir": str(data_dir)}})


@pytest.fixture()
def subtitle_routes(respx_mock: respx.MockRouter) -> respx.MockRouter:
    """One official English subtitle, no community results."""
    respx_mock.get(f"{CONTENTS_API_URL}/RO_1").respond(
        json=[{"name": "RO_1.en.srt", "type": "file", "download_url": _SUB_URL}]
    )
    respx_mock.get(url__startswith=CONTENTS_API_URL).respond(status_code=404)
    respx_mock.head(url__startswith="https://raw.githubusercontent.com").respond(status_code=404)
    respx_mock.get(url__startswith=LEGACY_SEARCH_URL).respond(json=[])
    return respx_mock


def _mock_torbox(router: respx.MockRouter, *, cached: bool) -> None:
    base = DEFAULT_BASE_URL
    router.get(f"{base}/torrents/checkcached").respond(
        json={"success": True, "data": {"abc123": {"name": "x"}} if cached else None}
    )
    router.get(
        f"{base}/torrents/mylist", params={"id": "55", "bypass_cache": "true"}
    ).respond(
        json={
            "success": True,
            "data": {
                "id": 55,
                "files": [
                    {"id": 0, "short_name": "[One Pace] Romance Dawn 01 [1080p].mkv", "size": 900},
                ],
            },
        }
    )
    router.get(f"{base}/torrents/mylist").respond(json={"success": True, "data": []})
    router.post(f"{base}/torrents/createtorrent").respond(
        json={"success": True, "data": {"torrent_id": 55}}
    )


class TestStreamPipeline:
    def test_without_credential(self, config: AppConfig, subtitle_routes: respx.MockRouter) -> None:
        with TestClient(create_app(config)) as client:
            resp = client.get(_STREAM)

        assert resp.status_code == 200
        streams = resp.json()["streams"]
        assert len(streams) == 10

        official, torrent = streams[:9], streams[9]
        assert official[0]["title"] == "One Pace Official - 1080p (English Subtitles)"
        assert all("url" in s for s in official)
        assert torrent["infoHash"] == "abc123"
        assert torrent["fileIdx"] == 0
        assert torrent["behaviorHints"]["bingeGroup"] == "onepace-torrent"
        assert torrent["behaviorHints"]["filename"] == "Romance Dawn 01.mkv"
        for stream in streams:
            assert stream["subtitles"][0]["url"] == _SUB_URL
            assert stream["subtitles"][0]["label"] == "One Pace Official - English (Romance Dawn)"

    def test_debrid_cached(self, config: AppConfig, subtitle_routes: respx.MockRouter) -> None:
        _mock_torbox(subtitle_routes, cached=True)

        with TestClient(create_app(config)) as client:
            resp = client.get(f"/api/v1/stremio/torbox={_KEY}/stream/series/pp_onepace:1:1.json")

        streams = resp.json()["streams"]
        assert len(streams) == 10
        debrid = streams[9]
        assert debrid["title"] == "Torbox (Instant) - [One Pace] Romance Dawn 01 [1080p].mkv"
        assert "infoHash" not in debrid
        query = parse_qs(urlparse(debrid["url"]).query)
        assert query["torrent_id"] == ["55"]
        assert query["file_id"] == ["0"]

        created = [c for c in subtitle_routes.calls if c.request.method == "POST"]
        assert len(created) == 1
        assert created[0].request.headers["Authorization"] == f"Bearer {_KEY}"

    def test_debrid_not_cached_has_no_torrent_fallback(
        self, config: AppConfig, subtitle_routes: respx.MockRouter
    ) -> None:
        _mock_torbox(subtitle_routes, cached=False)

        with TestClient(create_app(config)) as client:
            resp = client.get(_STREAM, params={"torboxApiKey": _KEY})

        streams = resp.json()["streams"]
        assert len(streams) == 9
        assert all("infoHash" not in s for s in streams)

    def test_unknown_id(self, config: AppConfig, subtitle_routes: respx.MockRouter) -> None:
        with TestClient(create_app(config)) as client:
            resp = client.get("/api/v1/stremio/stream/series/foo.json")

        assert resp.json() == {"streams": []}
        assert not subtitle_routes.calls

    def test_episode_without_official_or_torrents(
        self, config: AppConfig, subtitle_routes: respx.MockRouter
    ) -> None:
        with TestClient(create_app(config)) as client:
            resp = client.get("/api/v1/stremio/stream/series/pp_onepace:1:2.json")

        assert resp.json() == {"streams": []}


class TestCatalogPipeline:
    def test_catalog_meta_subtitles(
        self, config: AppConfig, subtitle_routes: respx.MockRouter
    ) -> None:
        with TestClient(create_app(config)) as client:
            catalog = client.get("/api/v1/stremio/catalog/series/seriesCatalog.json").json()
            meta = client.get("/api/v1/stremio/meta/series/pp_onepace.json").json()
            subs = client.get("/api/v1/stremio/subtitles/series/RO_1.json").json()
            health = client.get("/api/v1/healthz").json()

        assert catalog["metas"][0]["id"] == "pp_onepace"
        assert [v["id"] for v in meta["meta"]["videos"]] == ["RO_1", "RO_2", "OR_1"]
        assert subs["subtitles"] == [
            {
                "id": "en-0",
                "url": _SUB_URL,
                "lang": "en",
                "label": "One Pace Official - English (Episode RO_1)",
            }
        ]
        assert health["status"] == "ok"
        assert health["official_episodes"] > 0
