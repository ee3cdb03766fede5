from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from .app import create_app
from .docker_ops import RegistryError, connect
from .settings import settings


def _configure_logging(level: str) -> None:
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Route HTTP requests to docker containers by Host header")
    p.add_argument("--host", default=settings.host, help="Bind address (DUMBROUTER_HOST)")
    p.add_argument("--port", type=int, default=settings.port, help="Bind port (DUMBROUTER_PORT)")
    p.add_argument("--log-level", default=settings.log_level, help="Logging level (DUMBROUTER_LOG_LEVEL)")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.log_level)
    log = logging.getLogger("dumbrouter")

    try:
        docker_client = connect()
    except RegistryError as e:
        log.error("%s", e)
        return 1

    log.info("Listening on %s:%d, backends on %s", args.host, args.port, settings.localhost_ip)
    try:
        uvicorn.run(
            create_app(docker_client=docker_client),
            host=args.host,
            port=args.port,
            log_level=args.log_level.lower(),
        )
    finally:
        docker_client.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
