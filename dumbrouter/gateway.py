from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Iterable

from .docker_ops import PublishedPort, WorkloadRecord

logger = logging.getLogger(__name__)

NAME_PREFIXES = ("/http-", "/http-prod-")


@dataclass(frozen=True)
class BackendEndpoint:
    host: str
    port: int
    container: str = ""

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def matches_service(name: str, service: str) -> bool:
    # Plain prefix match: "foo" also matches "/http-foobar".
    return any(name.startswith(prefix + service) for prefix in NAME_PREFIXES)


def eligible_port(workload: WorkloadRecord) -> PublishedPort | None:
    """First port of the workload that is bound on the host, or None.

    Workloads without ports, or with no host-bound port, are logged and skipped.
    """
    name = workload.names[0]
    if not workload.ports:
        logger.warning("Container %s is http, but has no port!", name)
        return None

    ports = [p for p in workload.ports if p.host_bound]
    if not ports:
        logger.warning("Container %s needs 1 eligible port, but has %d!", name, len(ports))
        return None
    return ports[0]


def candidate_endpoints(service: str, workloads: Iterable[WorkloadRecord], host: str) -> list[BackendEndpoint]:
    """One endpoint per workload eligible for ``service``.

    Only the published port comes from the container; ``host`` is always the
    configured address of the docker host.
    """
    candidates: list[BackendEndpoint] = []
    for w in workloads:
        if len(w.names) != 1:
            continue
        name = w.names[0]
        if not matches_service(name, service):
            continue
        port = eligible_port(w)
        if port is None:
            continue
        candidates.append(BackendEndpoint(host=host, port=int(port.public_port), container=name))
    return candidates


def select_backend(
    service: str,
    workloads: Iterable[WorkloadRecord],
    host: str,
    rng: random.Random | None = None,
) -> BackendEndpoint | None:
    """Pick a backend for a service, uniformly at random among eligible containers.

    Returns None when no container qualifies.
    """
    candidates = candidate_endpoints(service, workloads, host)
    if not candidates:
        return None
    return (rng or random).choice(candidates)
