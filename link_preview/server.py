# File: link_preview/server.py
"""
HTTP transport for LinkPreview (aiohttp.web).

GET /link_preview?url=<url>
  200 + JSON metadata + ``Cache-Control: max-age=<MAX_AGE>`` on success,
  500 + the error text as plain body on failure,
  400 when ``url`` is missing.

Every response carries permissive CORS headers.
"""
from __future__ import annotations

import asyncio
import contextlib
from typing import AsyncIterator, Awaitable, Callable, Optional

from aiohttp import web

from link_preview.cache import MAX_AGE
from link_preview.config import ServiceConfig
from link_preview.logger import get_logger
from link_preview.models import Success
from link_preview.service import LinkPreviewService

__all__ = ["SERVICE_KEY", "build_app", "run_server"]

SERVICE_KEY = web.AppKey("service", LinkPreviewService)
CONFIG_KEY = web.AppKey("config", ServiceConfig)

log = get_logger("server")

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _set_cors_headers(request: web.Request, response: web.StreamResponse) -> None:
    headers = response.headers
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Allow-Methods"] = request.headers.get(
        "Access-Control-Request-Method", "GET, OPTIONS"
    )
    requested = request.headers.get("Access-Control-Request-Headers")
    if requested:
        headers["Access-Control-Allow-Headers"] = requested
    headers["Access-Control-Max-Age"] = "3600"


@web.middleware
async def cors_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
        preflight = web.Response(status=200)
        _set_cors_headers(request, preflight)
        return preflight
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        _set_cors_headers(request, exc)
        raise
    _set_cors_headers(request, response)
    return response


async def link_preview(request: web.Request) -> web.Response:
    url = request.query.get("url", "")
    if not url:
        raise web.HTTPBadRequest(text="missing required query parameter: url")
    outcome = await request.app[SERVICE_KEY].get_preview(url)
    if isinstance(outcome, Success):
        return web.json_response(
            outcome.metadata.to_dict(),
            headers={"Cache-Control": f"max-age={MAX_AGE}"},
        )
    return web.Response(status=500, text=outcome.error)


async def _purge_loop(service: LinkPreviewService, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        await service.cache.purge_expired()


def _service_ctx(injected: Optional[LinkPreviewService]):
    async def ctx(app: web.Application) -> AsyncIterator[None]:
        config = app[CONFIG_KEY]
        service = injected or LinkPreviewService(config)
        await service.start()
        app[SERVICE_KEY] = service
        purger = asyncio.create_task(_purge_loop(service, config.purge_interval))
        yield
        purger.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purger
        if injected is None:
            await service.close()

    return ctx


def build_app(config: Optional[ServiceConfig] = None, service: Optional[LinkPreviewService] = None) -> web.Application:
    """Create the application; *service* lets tests supply their own session/cache."""
    app = web.Application(middlewares=[cors_middleware])
    app[CONFIG_KEY] = config or (service.config if service else ServiceConfig())
    app.cleanup_ctx.append(_service_ctx(service))
    app.router.add_get("/link_preview", link_preview)
    return app


def run_server(config: ServiceConfig) -> None:
    """Serve until interrupted."""
    log.info("Server running at http://%s:%s", config.host, config.port)
    web.run_app(build_app(config), host=config.host, port=config.port, print=None)
