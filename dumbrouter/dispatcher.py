from __future__ import annotations

import logging
import random

import docker
import httpx
from starlette.concurrency import run_in_threadpool

from . import VERSION_TAG
from .docker_ops import RegistryError, list_running_workloads
from .gateway import select_backend
from .naming import service_from_host, strip_port
from .proxy import ForwardError, InboundRequest, ProxiedResponse, forward

logger = logging.getLogger(__name__)

# method -> forwarded to a backend?
METHODS: dict[str, bool] = {
    "GET": True,
    "POST": True,
    "PUT": True,
    "DELETE": True,
    "HEAD": True,
    "OPTIONS": True,
    "CONNECT": False,
    "TRACE": False,
}


def _text(status_code: int, message: str) -> ProxiedResponse:
    return ProxiedResponse(
        status_code=status_code,
        headers=[("content-type", "text/plain; charset=utf-8")],
        body=f"{message}  ({VERSION_TAG})".encode(),
    )


def internal_error() -> ProxiedResponse:
    return ProxiedResponse(
        status_code=500,
        headers=[("content-type", "text/plain; charset=utf-8")],
        body=f"Internal Server Error ({VERSION_TAG})".encode(),
    )


def no_backend(service: str) -> ProxiedResponse:
    return _text(500, f"No backend found for service {service}.")


def not_implemented() -> ProxiedResponse:
    return _text(501, "This method is not supported.")


class Router:
    """Routes each request by Host header to a randomly chosen matching container.

    The docker client and the http client are created once by the caller and
    shared by every request; the router itself keeps no per-request state.
    """

    def __init__(
        self,
        docker_client: docker.DockerClient,
        http_client: httpx.AsyncClient,
        localhost_ip: str,
        rng: random.Random | None = None,
    ):
        self.docker_client = docker_client
        self.http_client = http_client
        self.localhost_ip = localhost_ip
        self.rng = rng

    async def handle(self, request: InboundRequest) -> ProxiedResponse:
        if not METHODS.get(request.method.upper(), False):
            return not_implemented()

        service = service_from_host(strip_port(request.host))

        try:
            # docker-py is blocking; only the listing goes to a worker thread.
            workloads = await run_in_threadpool(list_running_workloads, self.docker_client)
        except RegistryError as e:
            logger.error("%s", e)
            return internal_error()

        endpoint = select_backend(service, workloads, self.localhost_ip, rng=self.rng)
        if endpoint is None:
            logger.info("No backend found for service %r (host %r)", service, request.host)
            return no_backend(service)

        logger.debug("%s %s/%s -> %s (%s)", request.method, request.host, request.path, endpoint, endpoint.container)
        try:
            return await forward(self.http_client, request, endpoint)
        except ForwardError as e:
            logger.error("%s", e)
            return internal_error()
