"""aiohttp application factory and HTTP routes."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from aiohttp import web

from common.protocol import API_ROOT, DOWNLOAD_PATH, NO_STORE, PING_PATH, UPLOAD_PATH

from .assets import resolve_asset
from .collector import UploadCollector
from .config import ServerConfig
from .errors import PayloadTooLarge, StreamFailure

LOGGER = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,HEAD,PUT,PATCH,POST,DELETE",
    "Access-Control-Allow-Headers": "*",
}


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:  # noqa: ANN001
    """Allow every origin, and answer preflight requests directly."""
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


class SpeedtestHandlers:
    """Request handlers.  Each request's state lives only in its own call."""

    def __init__(self, config: ServerConfig) -> None:
        self.config = config

    async def ping(self, request: web.Request) -> web.Response:
        return web.Response(status=200, headers=NO_STORE)

    async def download(self, request: web.Request) -> web.StreamResponse:
        filename = request.match_info["filename"]
        path = resolve_asset(self.config.download_dir, filename)
        if path is None:
            LOGGER.warning("Rejected download filename %r", filename)
            return web.Response(status=400, text="Invalid filename.")
        if not path.is_file():
            return web.Response(status=404, text="File not found.")
        return web.FileResponse(path, headers=NO_STORE)

    async def upload(self, request: web.Request) -> web.Response:
        LOGGER.info("Upload endpoint hit.")
        LOGGER.debug("Headers: %s", dict(request.headers))

        collector = UploadCollector(limit=self.config.upload_limit)
        try:
            await collector.consume(request.content.iter_any())
        except PayloadTooLarge as exc:
            LOGGER.warning("Upload rejected: %s", exc)
            return web.Response(status=413, text=str(exc))
        except StreamFailure:
            return web.Response(status=500, text="Upload stream error")
        except asyncio.CancelledError:
            # aiohttp cancels the handler when the client disconnects mid-body
            LOGGER.warning(
                "Upload aborted by client after %d bytes in %d chunks",
                collector.bytes_received,
                collector.chunk_count,
            )
            raise

        return web.Response(status=200, headers=NO_STORE)


def create_app(config: ServerConfig) -> web.Application:
    app = web.Application(middlewares=[cors_middleware])

    handlers = SpeedtestHandlers(config)
    app.router.add_get(f"{API_ROOT}{PING_PATH}", handlers.ping)
    app.router.add_get(f"{API_ROOT}{DOWNLOAD_PATH}/{{filename}}", handlers.download)
    app.router.add_post(f"{API_ROOT}{UPLOAD_PATH}", handlers.upload)

    public_dir = config.public_dir
    if public_dir is not None and Path(public_dir).is_dir():
        index = Path(public_dir) / "index.html"
        if index.is_file():

            async def _index(request: web.Request) -> web.FileResponse:
                return web.FileResponse(index)

            app.router.add_get("/", _index)
        app.router.add_static("/", public_dir)
        LOGGER.debug("Serving static files from %s", public_dir)

    return app
