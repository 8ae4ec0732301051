"""Tests for JsonMetadataStore."""

from __future__ import annotations

from pathlib import Path

import pytest

from pacearr.domain.ports.metadata import MetadataStorePort
from pacearr.infrastructure.metadata.json_store import JsonMetadataStore


@pytest.fixture()
def store(data_dir: Path) -> JsonMetadataStore:
    return JsonMetadataStore(data_dir)


class TestJsonMetadataStore:
    def test_implements_port(self, store: JsonMetadataStore) -> None:
        assert isinstance(store, MetadataStorePort)

    @pytest.mark.asyncio()
    async def test_series_meta(self, store: JsonMetadataStore) -> None:
        meta = await store.get_series_meta("pp_onepace")
        assert meta is not None
        assert meta["name"] == "One Pace"

    @pytest.mark.asyncio()
    async def test_list_episodes(self, store: JsonMetadataStore) -> None:
        videos = await store.list_episodes("pp_onepace")
        assert [v["id"] for v in videos] == ["RO_1", "RO_2", "OR_1"]

    @pytest.mark.asyncio()
    async def test_catalog(self, store: JsonMetadataStore) -> None:
        metas = await store.get_catalog("seriesCatalog")
        assert metas == [{"id": "pp_onepace", "type": "series", "name": "One Pace"}]

    @pytest.mark.asyncio()
    async def test_stream_descriptors(self, store: JsonMetadataStore) -> None:
        descriptors = await store.get_stream_descriptors("RO_1")
        assert len(descriptors) == 1
        d = descriptors[0]
        assert d.info_hash == "abc123"
        assert d.file_idx == 0
        assert d.extra["behaviorHints"] == {"filename": "Romance Dawn 01.mkv"}

    @pytest.mark.asyncio()
    async def test_missing_files(self, store: JsonMetadataStore) -> None:
        assert await store.get_series_meta("unknown") is None
        assert await store.list_episodes("unknown") == []
        assert await store.get_catalog("unknown") == []
        assert await store.get_stream_descriptors("ZZ_1") == []

    @pytest.mark.asyncio()
    async def test_unsafe_id_rejected(self, store: JsonMetadataStore) -> None:
        assert await store.get_stream_descriptors("../meta/series/pp_onepace") == []
        assert await store.get_series_meta("pp_onepace:1:1") is None

    @pytest.mark.asyncio()
    async def test_malformed_json(self, data_dir: Path, store: JsonMetadataStore) -> None:
        (data_dir / "stream" / "series" / "RO_2.json").write_text("{not json", encoding="utf-8")
        assert await store.get_stream_descriptors("RO_2") == []

    @pytest.mark.asyncio()
    async def test_non_object_root(self, data_dir: Path, store: JsonMetadataStore) -> None:
        (data_dir / "stream" / "series" / "RO_3.json").write_text("[1, 2]", encoding="utf-8")
        assert await store.get_stream_descriptors("RO_3") == []

    @pytest.mark.asyncio()
    async def test_reads_fresh_on_every_call(self, data_dir: Path, store: JsonMetadataStore) -> None:
        path = data_dir / "stream" / "series" / "RO_4.json"
        path.write_text('{"streams": []}', encoding="utf-8")
        assert await store.get_stream_descriptors("RO_4") == []

        path.write_text('{"streams": [{"infoHash": "h"}]}', encoding="utf-8")
        assert [d.info_hash for d in await store.get_stream_descriptors("RO_4")] == ["h"]
