"""FastAPI application factory (create_app)."""

from __future__ import annotations

import re
import time
from collections.abc import Awaitable, Callable
from html import escape

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from starlette.responses import Response

from pacearr.infrastructure.config import AppConfig
from pacearr.infrastructure.logging.setup import key_prefix
from pacearr.interfaces.api.stremio.router import router as stremio_router
from pacearr.interfaces.app_state import AppState
from pacearr.interfaces.composition import lifespan

log = structlog.get_logger(__name__)

_PATH_KEY_RE = re.compile(r"/torbox=([^/]+)")
_QUERY_KEY_RE = re.compile(r"(torboxApiKey=)([^&]+)")

STREMIO_PREFIX = "/api/v1/stremio"

_LANDING_PAGE = """<!doctype html>
<html>
<head><meta charset="utf-8"><title>{name}</title></head>
<body>
<h1>{name}</h1>
<p><strong>Addon is running.</strong></p>
<p>Install (torrent streams):</p>
<code>{base}/manifest.json</code>
<p>Install with Torbox:</p>
<code>{base}/torbox=YOUR_API_KEY/manifest.json</code>
</body>
</html>
"""


def redact_credentials(text: str) -> str:
    """Shorten debrid credentials in a request path or query string."""
    text = _PATH_KEY_RE.sub(lambda m: f"/torbox={key_prefix(m.group(1))}", text)
    return _QUERY_KEY_RE.sub(lambda m: f"{m.group(1)}{key_prefix(m.group(2))}", text)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration ONLY, NO resource initialization.

    Resources (HTTP client, stores, use cases) are created in lifespan().
    """
    app = FastAPI(
        title="pacearr",
        description="One Pace Stremio addon with official, debrid and torrent streams",
        version=config.stremio.addon_version,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    app.include_router(stremio_router, prefix="/api/v1")

    @app.get("/", response_class=HTMLResponse)
    async def landing(request: Request) -> HTMLResponse:
        """Minimal page listing the install URLs."""
        base = f"{str(request.base_url).rstrip('/')}{STREMIO_PREFIX}"
        return HTMLResponse(
            _LANDING_PAGE.format(
                name=escape(config.stremio.addon_name),
                base=escape(base),
            ),
            headers={"Access-Control-Allow-Origin": "*"},
        )

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str | int]:
        """Liveness probe: returns 200 as long as the process is running."""
        catalog = getattr(app.state, "official_catalog", None)
        return {
            "status": "ok",
            "official_episodes": len(catalog.available_episodes()) if catalog else 0,
        }

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=redact_credentials(request.url.path),
                query=redact_credentials(str(request.url.query)),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
