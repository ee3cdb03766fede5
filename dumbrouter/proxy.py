"""Relay one request to a backend and capture its response.

The request goes out as it came in: same method, same headers (Host included),
same path and query, same body. The response is captured whole with its raw,
undecoded body so that it can be handed back byte for byte.
"""
from __future__ import annotations

from dataclasses import dataclass, field

import httpx

from . import DumbrouterError
from .gateway import BackendEndpoint

# Framing is recomputed by the transport for the body actually sent/returned.
REQUEST_FRAMING_HEADERS = {"content-length", "transfer-encoding"}
RESPONSE_FRAMING_HEADERS = {"transfer-encoding"}

Headers = list[tuple[str, str]]


class ForwardError(DumbrouterError):
    """The backend could not be reached, timed out or broke off the response."""


@dataclass
class InboundRequest:
    method: str
    host: str
    path: str = ""
    query: str = ""
    headers: Headers = field(default_factory=list)
    body: bytes = b""


@dataclass
class ProxiedResponse:
    status_code: int
    headers: Headers = field(default_factory=list)
    body: bytes = b""


def target_url(endpoint: BackendEndpoint, path: str, query: str = "") -> str:
    url = f"http://{endpoint}/{path.lstrip('/')}"
    if query:
        url += f"?{query}"
    return url


def _without(headers: Headers, names: set[str]) -> Headers:
    return [(k, v) for k, v in headers if k.lower() not in names]


async def forward(client: httpx.AsyncClient, request: InboundRequest, endpoint: BackendEndpoint) -> ProxiedResponse:
    """Send ``request`` to ``endpoint`` and return the backend's response.

    Redirects are relayed, never followed. Raises ForwardError on any transport
    failure, including a body that cannot be read to the end.
    """
    outbound = client.build_request(
        request.method,
        target_url(endpoint, request.path, request.query),
        headers=_without(request.headers, REQUEST_FRAMING_HEADERS),
        content=request.body or None,
    )
    try:
        resp = await client.send(outbound, stream=True, follow_redirects=False)
        try:
            body = b"".join([chunk async for chunk in resp.aiter_raw()])
        finally:
            await resp.aclose()
    except httpx.HTTPError as e:
        raise ForwardError(f"{request.method} {outbound.url} failed: {type(e).__name__}: {e}") from e

    headers = [(k.decode("latin-1"), v.decode("latin-1")) for k, v in resp.headers.raw]
    return ProxiedResponse(
        status_code=resp.status_code,
        headers=_without(headers, RESPONSE_FRAMING_HEADERS),
        body=body,
    )


def new_http_client(timeout_s: float | None = None) -> httpx.AsyncClient:
    """The client shared by all requests.

    The connection pool is unbounded so a handful of stalled backends can never
    hold up requests to other services.
    """
    return httpx.AsyncClient(
        timeout=timeout_s,
        limits=httpx.Limits(max_connections=None, max_keepalive_connections=100),
    )
