import random
import sys

import httpx
import pytest
from docker.errors import APIError

# Ensure project root is importable when the package is not installed
import os as _os
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)


def container(name, *ports, names=None, cid="c0ffee"):
    """Engine-shaped container listing entry (as returned by ``APIClient.containers``)."""
    return {
        "Id": cid,
        "Names": list(names) if names is not None else [name],
        "Ports": list(ports),
        "State": "running",
    }


def published(public_port, private_port=80, ip="0.0.0.0"):
    return {"IP": ip, "PrivatePort": private_port, "PublicPort": public_port, "Type": "tcp"}


def unpublished(private_port=80):
    return {"PrivatePort": private_port, "Type": "tcp"}


class FakeAPI:
    def __init__(self, containers=None, error=None):
        self.listing = list(containers or [])
        self.error = error
        self.calls = []

    def containers(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return list(self.listing)


class FakeDocker:
    """Stands in for ``docker.DockerClient``; only the low-level listing is used."""

    def __init__(self, containers=None, error=None):
        self.api = FakeAPI(containers, error)
        self.closed = False

    def close(self):
        self.closed = True


@pytest.fixture
def fake_docker():
    return FakeDocker()


@pytest.fixture
def broken_docker():
    return FakeDocker(error=APIError("500 Server Error: Internal Server Error"))


def backend_response(status_code, headers=(), body=b""):
    # A streamed body, like a real backend: httpx.Response(content=...) would be read eagerly.
    return httpx.Response(status_code, headers=list(headers), stream=httpx.ByteStream(body))


@pytest.fixture
def backend_calls():
    return []


@pytest.fixture
def http_client(backend_calls):
    """httpx client whose backend echoes what it received."""

    def handler(request: httpx.Request) -> httpx.Response:
        backend_calls.append(request)
        body = b"echo:" + request.content
        return backend_response(
            200,
            [
                ("x-backend", f"{request.url.host}:{request.url.port}"),
                ("content-length", str(len(body))),
                ("set-cookie", "a=1"),
                ("set-cookie", "b=2"),
            ],
            body,
        )

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def rng():
    return random.Random(1234)
