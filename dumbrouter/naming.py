from __future__ import annotations

ROOT_SERVICE = "_root"


def strip_port(host: str) -> str:
    """Drop a trailing ``:port`` from a Host header value. Routing never looks at the port."""
    return host.split(":", 1)[0]


def service_from_host(hostname: str) -> str:
    """Map a hostname to the service id used for container lookup.

      localhost            -> localhost
      example.com          -> _root
      a.b.c.d.example.com  -> a.b.c.d

    The last two labels are assumed to be the base domain.
    """
    parts = hostname.split(".")
    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2:
        return ROOT_SERVICE
    return ".".join(parts[:-2])
