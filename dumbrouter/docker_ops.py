from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import docker
import requests
from docker.errors import DockerException

from . import DumbrouterError


class RegistryError(DumbrouterError):
    """The docker engine could not be reached or answered with an error."""


@dataclass(frozen=True)
class PublishedPort:
    private_port: int
    type: str
    ip: str | None = None
    public_port: int | None = None

    @property
    def host_bound(self) -> bool:
        return self.ip is not None and self.public_port is not None


@dataclass(frozen=True)
class WorkloadRecord:
    id: str
    names: tuple[str, ...]
    ports: tuple[PublishedPort, ...]


def connect() -> docker.DockerClient:
    """Create the docker client shared by every request."""
    try:
        return docker.from_env()
    except DockerException as e:
        raise RegistryError(f"Cannot connect to the docker engine: {e}") from e


def _port_from_api(raw: dict[str, Any]) -> PublishedPort:
    return PublishedPort(
        private_port=int(raw.get("PrivatePort", 0)),
        type=raw.get("Type", "tcp"),
        ip=raw.get("IP") or None,
        public_port=raw.get("PublicPort"),
    )


def _workload_from_api(raw: dict[str, Any]) -> WorkloadRecord:
    return WorkloadRecord(
        id=raw.get("Id", ""),
        names=tuple(raw.get("Names") or ()),
        ports=tuple(_port_from_api(p) for p in raw.get("Ports") or ()),
    )


def list_running_workloads(client: docker.DockerClient) -> list[WorkloadRecord]:
    """List running containers with their names and published ports.

    Uses the low-level API so we get the engine's listing as-is (one call, no
    per-container inspect). Names keep their leading slash, e.g. ``/http-foo``.
    The running filter is evaluated by the engine.
    """
    try:
        containers = client.api.containers(all=True, filters={"status": "running"})
    except (DockerException, requests.exceptions.RequestException) as e:
        raise RegistryError(f"Listing containers failed: {type(e).__name__}: {e}") from e
    return [_workload_from_api(c) for c in containers]
