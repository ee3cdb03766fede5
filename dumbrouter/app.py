from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager

import docker
import httpx
from fastapi import FastAPI, Request, Response

from . import __version__
from .dispatcher import METHODS, Router
from .docker_ops import connect
from .proxy import InboundRequest, ProxiedResponse, new_http_client
from .settings import Settings, settings

logger = logging.getLogger(__name__)


def _inbound(request: Request, path: str, body: bytes) -> InboundRequest:
    # raw_path keeps percent-escapes (e.g. %2F) exactly as the client sent them.
    raw_path = request.scope.get("raw_path")
    return InboundRequest(
        method=request.method,
        host=request.headers.get("host", ""),
        path=raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else path,
        query=request.url.query,
        headers=[(k.decode("latin-1"), v.decode("latin-1")) for k, v in request.headers.raw],
        body=body,
    )


def _to_response(result: ProxiedResponse) -> Response:
    response = Response(content=result.body, status_code=result.status_code)
    if any(k.lower() == "content-length" for k, _ in result.headers):
        del response.headers["content-length"]
    for k, v in result.headers:
        response.headers.append(k, v)
    return response


def create_app(
    docker_client: docker.DockerClient | None = None,
    http_client: httpx.AsyncClient | None = None,
    app_settings: Settings | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    """Build the router app.

    Clients passed in are used as-is and left open. Missing ones are created at
    startup and closed at shutdown. Either way a single instance of each serves
    every request.
    """
    cfg = app_settings or settings

    def _router(dc: docker.DockerClient, hc: httpx.AsyncClient) -> Router:
        return Router(dc, hc, localhost_ip=cfg.localhost_ip, rng=rng)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if docker_client is not None and http_client is not None:
            yield
            return

        dc = docker_client if docker_client is not None else connect()
        hc = http_client if http_client is not None else new_http_client(cfg.backend_timeout_s)
        app.state.router = _router(dc, hc)
        logger.info("Routing to backends on %s", cfg.localhost_ip)
        try:
            yield
        finally:
            if http_client is None:
                await hc.aclose()
            if docker_client is None:
                dc.close()

    # Docs and openapi routes are off: every path belongs to the proxied services.
    app = FastAPI(
        title="dumbrouter",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    if docker_client is not None and http_client is not None:
        app.state.router = _router(docker_client, http_client)

    @app.api_route("/{path:path}", methods=list(METHODS), include_in_schema=False)
    async def route(request: Request, path: str) -> Response:
        inbound = _inbound(request, path, await request.body())
        result = await request.app.state.router.handle(inbound)
        return _to_response(result)

    return app
