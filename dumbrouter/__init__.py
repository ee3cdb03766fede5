"""dumbrouter: an intentionally dumb, Docker name-based HTTP router.

Every request is routed purely from its Host header:
 - the hostname is turned into a service id (``svc.example.com`` -> ``svc``)
 - running containers named ``/http-<svc>...`` or ``/http-prod-<svc>...`` are looked up
 - one of them is picked at random and the request is relayed to its published port

There is no state between requests; the container registry is queried every time.
"""
from __future__ import annotations

__version__ = "0.1.0"

VERSION_TAG = f"dumbrouter/{__version__}"


class DumbrouterError(Exception):
    """Base class for errors that abort routing of a single request."""
