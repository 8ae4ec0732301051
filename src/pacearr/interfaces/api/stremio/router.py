"""Stremio addon API endpoints (manifest, catalog, meta, stream, subtitles).

Every route is also served below ``/torbox={api_key}/`` so the debrid
credential can travel inside the install URL. The credential is resolved
once per request and handed to the use case as an argument.
"""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from pacearr.domain.entities.stremio import StreamRequest
from pacearr.infrastructure.config import AppConfig
from pacearr.infrastructure.logging.setup import key_prefix
from pacearr.infrastructure.stremio.stream_converter import (
    candidate_to_stremio,
    subtitle_to_stremio,
)
from pacearr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/stremio", tags=["stremio"])

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}

CREDENTIAL_QUERY_PARAM = "torboxApiKey"


def _json(content: dict[str, Any]) -> JSONResponse:
    return JSONResponse(content=content, headers=_CORS_HEADERS)


def build_manifest(config: AppConfig, *, debrid: bool = False) -> dict[str, Any]:
    """Build the Stremio addon manifest."""
    stremio = config.stremio
    description = "One Pace episodes with official streams and subtitles"
    if debrid:
        description += ", resolved through Torbox"
    return {
        "id": stremio.addon_id,
        "version": stremio.addon_version,
        "name": stremio.addon_name,
        "description": description,
        "types": ["series"],
        "catalogs": [
            {
                "type": "series",
                "id": stremio.catalog_id,
                "name": "One Pace",
            }
        ],
        "resources": ["catalog", "meta", "stream", "subtitles"],
        "idPrefixes": [stremio.series_id],
        "behaviorHints": {
            "adult": False,
            "configurable": True,
        },
    }


def resolve_credential(
    request: Request,
    config: AppConfig,
    path_key: str | None = None,
) -> str | None:
    """Pick the debrid credential for one request.

    Order: install-URL key, ``?torboxApiKey=`` query, configured default.
    """
    if path_key:
        return path_key
    query_key = request.query_params.get(CREDENTIAL_QUERY_PARAM)
    if query_key:
        return query_key
    return config.torbox.api_key or None


# --- shared handlers ---


async def _manifest(request: Request, api_key: str | None) -> JSONResponse:
    state = cast(AppState, request.app.state)
    return _json(build_manifest(state.config, debrid=bool(api_key)))


async def _catalog(request: Request, content_type: str, catalog_id: str) -> JSONResponse:
    state = cast(AppState, request.app.state)
    metas = await state.stremio_catalog_uc.catalog(content_type, catalog_id)
    return _json({"metas": metas})


async def _meta(request: Request, content_type: str, meta_id: str) -> JSONResponse:
    state = cast(AppState, request.app.state)
    meta = await state.stremio_catalog_uc.meta(content_type, meta_id)
    return _json({"meta": meta})


async def _stream(
    request: Request,
    content_type: str,
    stream_id: str,
    path_key: str | None,
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    credential = resolve_credential(request, state.config, path_key)

    log.info(
        "stremio_stream_request",
        content_type=content_type,
        stream_id=stream_id,
        credential=key_prefix(credential),
    )

    candidates = await state.stremio_stream_uc.execute(
        StreamRequest(raw_id=stream_id, content_type=content_type, credential=credential)
    )
    return _json({"streams": [candidate_to_stremio(c) for c in candidates]})


async def _subtitles(request: Request, content_type: str, item_id: str) -> JSONResponse:
    state = cast(AppState, request.app.state)
    refs = await state.stremio_stream_uc.subtitles(
        StreamRequest(raw_id=item_id, content_type=content_type)
    )
    return _json(
        {"subtitles": [subtitle_to_stremio(ref, idx) for idx, ref in enumerate(refs)]}
    )


# --- plain routes ---


@router.get("/manifest.json")
async def stremio_manifest(request: Request) -> JSONResponse:
    """Serve the Stremio addon manifest."""
    return await _manifest(request, None)


@router.get("/catalog/{content_type}/{catalog_id}.json")
async def stremio_catalog(request: Request, content_type: str, catalog_id: str) -> JSONResponse:
    return await _catalog(request, content_type, catalog_id)


@router.get("/meta/{content_type}/{meta_id}.json")
async def stremio_meta(request: Request, content_type: str, meta_id: str) -> JSONResponse:
    return await _meta(request, content_type, meta_id)


@router.get("/stream/{content_type}/{stream_id}.json")
async def stremio_stream(request: Request, content_type: str, stream_id: str) -> JSONResponse:
    """Resolve ordered streams for an episode."""
    return await _stream(request, content_type, stream_id, None)


@router.get("/subtitles/{content_type}/{item_id}.json")
async def stremio_subtitles(request: Request, content_type: str, item_id: str) -> JSONResponse:
    return await _subtitles(request, content_type, item_id)


@router.get("/subtitles/{content_type}/{item_id}/{extra}.json")
async def stremio_subtitles_extra(
    request: Request,
    content_type: str,
    item_id: str,
    extra: str,
) -> JSONResponse:
    # extra (videoHash, videoSize, filename) does not narrow the lookup
    return await _subtitles(request, content_type, item_id)


# --- credential-carrying routes ---


@router.get("/torbox={api_key}/manifest.json")
async def stremio_manifest_debrid(request: Request, api_key: str) -> JSONResponse:
    log.info("stremio_manifest_debrid", credential=key_prefix(api_key))
    return await _manifest(request, api_key)


@router.get("/torbox={api_key}/catalog/{content_type}/{catalog_id}.json")
async def stremio_catalog_debrid(
    request: Request,
    api_key: str,
    content_type: str,
    catalog_id: str,
) -> JSONResponse:
    return await _catalog(request, content_type, catalog_id)


@router.get("/torbox={api_key}/meta/{content_type}/{meta_id}.json")
async def stremio_meta_debrid(
    request: Request,
    api_key: str,
    content_type: str,
    meta_id: str,
) -> JSONResponse:
    return await _meta(request, content_type, meta_id)


@router.get("/torbox={api_key}/stream/{content_type}/{stream_id}.json")
async def stremio_stream_debrid(
    request: Request,
    api_key: str,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    return await _stream(request, content_type, stream_id, api_key)


@router.get("/torbox={api_key}/subtitles/{content_type}/{item_id}.json")
async def stremio_subtitles_debrid(
    request: Request,
    api_key: str,
    content_type: str,
    item_id: str,
) -> JSONResponse:
    return await _subtitles(request, content_type, item_id)


@router.get("/torbox={api_key}/subtitles/{content_type}/{item_id}/{extra}.json")
async def stremio_subtitles_extra_debrid(
    request: Request,
    api_key: str,
    content_type: str,
    item_id: str,
    extra: str,
) -> JSONResponse:
    return await _subtitles(request, content_type, item_id)
