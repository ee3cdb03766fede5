from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    # Host part of every backend endpoint. The default resolves to the docker host from inside a container.
    localhost_ip: str = field(default_factory=lambda: _env_str("LOCALHOST_IP", "host.docker.internal"))

    # Bind address
    host: str = field(default_factory=lambda: _env_str("DUMBROUTER_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("DUMBROUTER_PORT", 8080))

    log_level: str = field(default_factory=lambda: _env_str("DUMBROUTER_LOG_LEVEL", "INFO"))

    # None means no timeout at all on backend requests.
    backend_timeout_s: float | None = field(default_factory=lambda: _env_float("DUMBROUTER_BACKEND_TIMEOUT_S"))


settings = Settings()
