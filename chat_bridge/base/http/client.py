"""Shared HTTP client pool for the transport layer.

Purpose:
    Provide a centralized, thread-safe pool of reusable ``httpx.Client``
    instances so that concurrent bridges reuse keep-alive connections instead
    of creating a client per exchange. Each exchange still owns its own
    response object exclusively; only the connection pool is shared.

Timeout strategy:
    Timeouts derive from :func:`get_timeout_config` at the time a client is
    first created for a key and are cached with it.

Lifecycle & cleanup:
    - Clients are cached by ``purpose`` (e.g. ``"stream"``, ``"complete"``).
    - All clients are closed at interpreter exit via ``atexit``. Tests may
      call :func:`close_all_clients` explicitly.
"""

from __future__ import annotations

import atexit
import threading
from contextlib import suppress
from typing import Dict

import httpx

from ..timeouts import get_timeout_config

_CLIENTS: Dict[str, httpx.Client] = {}
_LOCK = threading.RLock()


def get_httpx_client(purpose: str) -> httpx.Client:
    """Return a pooled ``httpx.Client`` for ``purpose``.

    The first request for a purpose creates a client configured with
    :func:`get_timeout_config`; later requests reuse the same instance.
    Endpoints are absolute URLs so no ``base_url`` is bound to the client.

    Thread-safety:
        Safe for concurrent use; creation is guarded by a re-entrant lock.
    """
    client = _CLIENTS.get(purpose)
    if client is not None and not client.is_closed:
        return client

    with _LOCK:
        client = _CLIENTS.get(purpose)
        if client is not None and not client.is_closed:
            return client
        client = httpx.Client(timeout=get_timeout_config().to_httpx())
        _CLIENTS[purpose] = client
        return client


def close_all_clients() -> None:
    """Close and clear all pooled HTTP clients."""
    with _LOCK:
        for c in _CLIENTS.values():
            # interpreter shutdown may have torn down the transport already
            with suppress(Exception):
                c.close()
        _CLIENTS.clear()


atexit.register(close_all_clients)

__all__ = ["get_httpx_client", "close_all_clients"]
