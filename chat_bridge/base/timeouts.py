"""Timeout configuration for outbound HTTP calls.

Centralizes the timeout values handed to ``httpx`` so that no module
hard-codes its own numbers. The bridge itself does not impose an absolute
read deadline on a stream: a caller wanting one signals the cancellation
token. ``read_timeout_seconds`` only bounds the idle gap between two chunks.

Supported environment variables (all optional, positive floats):
    CHAT_BRIDGE_TIMEOUT_CONNECT_SECONDS
    CHAT_BRIDGE_TIMEOUT_READ_SECONDS
    CHAT_BRIDGE_TIMEOUT_WRITE_SECONDS
    CHAT_BRIDGE_TIMEOUT_POOL_SECONDS

Values are parsed on first use and cached until one of the variables changes.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

import httpx

_ENV_NAMES = (
    "CHAT_BRIDGE_TIMEOUT_CONNECT_SECONDS",
    "CHAT_BRIDGE_TIMEOUT_READ_SECONDS",
    "CHAT_BRIDGE_TIMEOUT_WRITE_SECONDS",
    "CHAT_BRIDGE_TIMEOUT_POOL_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Establishing the TCP/TLS connection.
        read_timeout_seconds: Maximum idle gap while waiting for the next
            chunk of the response body.
        write_timeout_seconds: Sending the request body.
        pool_timeout_seconds: Waiting for a free connection in the pool.
    """

    connect_timeout_seconds: float = 10.0
    read_timeout_seconds: float = 60.0
    write_timeout_seconds: float = 30.0
    pool_timeout_seconds: float = 10.0

    def to_httpx(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout_seconds,
            read=self.read_timeout_seconds,
            write=self.write_timeout_seconds,
            pool=self.pool_timeout_seconds,
        )


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read a positive float from the environment, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(name, "") for name in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED

    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_NAMES[0], defaults.connect_timeout_seconds),
        read_timeout_seconds=_parse_env_float(_ENV_NAMES[1], defaults.read_timeout_seconds),
        write_timeout_seconds=_parse_env_float(_ENV_NAMES[2], defaults.write_timeout_seconds),
        pool_timeout_seconds=_parse_env_float(_ENV_NAMES[3], defaults.pool_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
]
